"""Matrimony background tasks: purge profiles whose deletion date has passed."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.media_utils import destroy_images
from libs.db.session import session_scope
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.matrimony_service.models import MatrimonyProfile

logger = get_logger(__name__)


async def purge_scheduled_profiles(
    db: AsyncSession, now: Optional[datetime] = None
) -> int:
    """
    Delete every profile with ``scheduled_deletion <= now`` and its photos.

    Returns:
        Number of profiles deleted
    """
    now = now or utc_now()
    result = await db.execute(
        select(MatrimonyProfile).where(
            MatrimonyProfile.scheduled_deletion.is_not(None),
            MatrimonyProfile.scheduled_deletion <= now,
        )
    )
    profiles = result.scalars().all()
    if not profiles:
        return 0

    public_ids = []
    for profile in profiles:
        public_ids.extend(photo.get("public_id") for photo in profile.photos or [])
        await db.delete(profile)
    await db.commit()

    images_deleted = await destroy_images(public_ids)
    logger.info(
        f"Purged {len(profiles)} completed matrimony profiles "
        f"({images_deleted}/{len(public_ids)} photos removed)"
    )
    return len(profiles)


async def cleanup_scheduled_profiles() -> int:
    async with session_scope() as db:
        return await purge_scheduled_profiles(db)
