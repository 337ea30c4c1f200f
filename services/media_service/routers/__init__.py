"""Media service routers package."""

from services.media_service.routers.gallery import admin_router as gallery_admin_router
from services.media_service.routers.gallery import router as gallery_router
from services.media_service.routers.upload import router as upload_router

__all__ = [
    "gallery_router",
    "gallery_admin_router",
    "upload_router",
]
