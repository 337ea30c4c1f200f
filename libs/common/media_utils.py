"""Media host (Cloudinary) helpers.

Browsers upload images straight to Cloudinary using parameters signed here;
services only persist the resulting ``url`` and ``public_id`` and ask the host
to destroy images when the owning record is deleted.
"""

import asyncio
import time
from typing import Iterable

import cloudinary
import cloudinary.uploader
import cloudinary.utils
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

UPLOAD_FOLDERS = ("gallery", "events", "matrimony", "profiles")
ADMIN_ONLY_FOLDERS = frozenset({"gallery", "events"})


class MediaHostNotConfigured(RuntimeError):
    """Raised when Cloudinary credentials are missing."""


def _configure() -> None:
    settings = get_settings()
    if not settings.cloudinary_enabled:
        raise MediaHostNotConfigured("Cloudinary credentials are not configured")
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def sign_upload(folder: str) -> dict:
    """
    Build signed parameters for a direct browser upload into ``folder``.

    Args:
        folder: One of UPLOAD_FOLDERS; stored under the root folder prefix.

    Returns:
        Dict with signature, timestamp, api_key, cloud_name, folder and
        transformation, ready to post to the Cloudinary upload endpoint.
    """
    if folder not in UPLOAD_FOLDERS:
        raise ValueError(f"Unknown upload folder: {folder}")

    _configure()
    settings = get_settings()
    timestamp = int(time.time())
    params = {
        "timestamp": timestamp,
        "folder": f"{settings.CLOUDINARY_ROOT_FOLDER}/{folder}",
        "transformation": settings.CLOUDINARY_UPLOAD_TRANSFORMATION,
    }
    signature = cloudinary.utils.api_sign_request(
        params, settings.CLOUDINARY_API_SECRET
    )
    return {
        **params,
        "signature": signature,
        "api_key": settings.CLOUDINARY_API_KEY,
        "cloud_name": settings.CLOUDINARY_CLOUD_NAME,
    }


async def destroy_images(public_ids: Iterable[str]) -> int:
    """
    Delete hosted images by public id.

    Failures are logged and skipped so the owning record can still be removed.

    Returns:
        Number of images the host confirmed as deleted
    """
    ids = [pid for pid in public_ids if pid]
    if not ids:
        return 0

    try:
        _configure()
    except MediaHostNotConfigured:
        logger.warning(f"Media host not configured; skipped deleting {len(ids)} images")
        return 0

    deleted = 0
    for public_id in ids:
        try:
            result = await asyncio.to_thread(cloudinary.uploader.destroy, public_id)
        except Exception as e:
            logger.warning(f"Failed to delete hosted image {public_id}: {e}")
            continue
        if result.get("result") == "ok":
            deleted += 1
    return deleted
