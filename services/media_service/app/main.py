"""FastAPI application for the Media Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware

from services.media_service.routers import (
    gallery_admin_router,
    gallery_router,
    upload_router,
)


def create_app() -> FastAPI:
    """Create and configure the Media Service FastAPI app."""
    app = FastAPI(
        title="Blue City Media Service",
        version="0.1.0",
        description="Signed uploads to the media host and the photo gallery.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "media"}

    app.include_router(upload_router)
    app.include_router(gallery_router)
    app.include_router(gallery_admin_router)

    return app


app = create_app()
