"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its dependencies.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.settings import settings
from shared.config.logging import pos_api_logger as logger
from shared.infrastructure.db import get_db_context
from shared.infrastructure.events import get_event_circuit_breaker, get_redis_sync_client


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "pos-api",
        "environment": settings.environment,
    }


def check_postgresql_health() -> dict:
    """Check PostgreSQL connectivity."""
    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
        return {"status": "healthy"}
    except Exception as e:
        logger.warning("PostgreSQL health check failed", error=str(e))
        return {"status": "unhealthy", "error": type(e).__name__}


def check_redis_health() -> dict:
    """Check Redis connectivity through the shared pool."""
    try:
        get_redis_sync_client().ping()
        return {"status": "healthy"}
    except Exception as e:
        logger.warning("Redis health check failed", error=str(e))
        return {"status": "unhealthy", "error": type(e).__name__}


@router.get("/health/detailed")
def detailed_health_check():
    """
    Detailed health check that verifies connectivity to dependencies.
    Returns status of PostgreSQL and Redis connections plus the event
    publisher circuit breaker.

    Returns 503 Service Unavailable if PostgreSQL is down. Redis is
    best-effort for orders, so a Redis outage only degrades the status.
    """
    checks = {
        "service": "pos-api",
        "environment": settings.environment,
        "dependencies": {
            "postgresql": check_postgresql_health(),
            "redis": check_redis_health(),
        },
        "event_circuit_breaker": get_event_circuit_breaker().get_stats(),
    }

    db_healthy = checks["dependencies"]["postgresql"]["status"] == "healthy"
    all_healthy = all(
        dep["status"] == "healthy" for dep in checks["dependencies"].values()
    )
    checks["status"] = "healthy" if all_healthy else "degraded"

    if not db_healthy:
        return JSONResponse(content=checks, status_code=503)

    return checks
