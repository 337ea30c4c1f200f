"""FastAPI application for the Matrimony Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware

from services.matrimony_service.routers import (
    admin_router,
    internal_router,
    profiles_router,
)


def create_app() -> FastAPI:
    """Create and configure the Matrimony Service FastAPI app."""
    app = FastAPI(
        title="Blue City Matrimony Service",
        version="0.1.0",
        description="Matrimony profiles, listings and moderation.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "matrimony"}

    app.include_router(profiles_router)
    app.include_router(admin_router)
    app.include_router(internal_router)

    return app


app = create_app()
