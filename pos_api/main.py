"""
POS API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from pos_api.core.cors import configure_cors
from pos_api.core.lifespan import lifespan
from pos_api.core.middlewares import register_middlewares
from pos_api.routers.orders import router as orders_router
from pos_api.routers.public import health_router
from shared.config.settings import settings


app = FastAPI(
    title="Restaurant POS API",
    description="Order lifecycle API for the restaurant point of sale",
    version="0.1.0",
    lifespan=lifespan,
)

register_middlewares(app)
configure_cors(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(orders_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pos_api.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        reload=True,
    )
