"""Matrimony service routers package."""

from services.matrimony_service.routers.admin import router as admin_router
from services.matrimony_service.routers.internal import router as internal_router
from services.matrimony_service.routers.profiles import router as profiles_router

__all__ = [
    "profiles_router",
    "admin_router",
    "internal_router",
]
