"""FastAPI application for the Members Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware

from services.members_service.routers import admin_router, auth_router, internal_router


def create_app() -> FastAPI:
    """Create and configure the Members Service FastAPI app."""
    app = FastAPI(
        title="Blue City Members Service",
        version="0.1.0",
        description="Accounts, authentication and admin account management.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(internal_router)

    return app


app = create_app()
