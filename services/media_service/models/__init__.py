"""Media Service models package."""

from services.media_service.models.gallery import GalleryPhoto  # noqa: F401

__all__ = ["GalleryPhoto"]
