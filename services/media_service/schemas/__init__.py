"""Media Service schemas package."""

from services.media_service.schemas.media import (  # noqa: F401
    GalleryPhotoCreate,
    GalleryPhotoListResponse,
    GalleryPhotoResponse,
    MessageResponse,
    SignedUploadParams,
    UploadFolder,
)
