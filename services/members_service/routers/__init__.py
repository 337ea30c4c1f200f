"""Members service routers package."""

from services.members_service.routers.admin import router as admin_router
from services.members_service.routers.auth import router as auth_router
from services.members_service.routers.internal import router as internal_router

__all__ = [
    "auth_router",
    "admin_router",
    "internal_router",
]
