"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine
from shared.config.settings import settings
from shared.config.logging import setup_logging, pos_api_logger as logger
from shared.infrastructure.events import close_redis_sync_client
from pos_api.models import Base
from pos_api.core.dependencies import get_event_publisher


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    # Initialize logging
    setup_logging()

    # Validate production settings before startup
    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(config_errors)}. "
                "Server will not start with unsafe configuration."
            )
        else:
            logger.warning("Running with development defaults")

    # Startup
    logger.info("Starting POS API", port=settings.api_port, env=settings.environment)

    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    # Shutdown
    logger.info("Shutting down POS API")

    # Drain queued order events before the pool goes away
    get_event_publisher().shutdown(wait=True)
    logger.info("Order event publisher stopped")

    close_redis_sync_client()
    logger.info("Redis connection pool closed")
