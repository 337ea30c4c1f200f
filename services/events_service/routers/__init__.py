"""Events service routers package."""

from services.events_service.routers.events import admin_router as events_admin_router
from services.events_service.routers.events import router as events_router

__all__ = [
    "events_router",
    "events_admin_router",
]
