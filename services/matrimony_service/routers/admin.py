"""Admin matrimony moderation: list everything, hide, complete, delete."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger
from libs.common.media_utils import destroy_images
from libs.db.session import get_async_db
from libs.matrimony.lifecycle import Action
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.matrimony_service.models import MatrimonyProfile
from services.matrimony_service.routers._helpers import (
    apply_transition,
    get_profile_or_404,
    page_count,
)
from services.matrimony_service.schemas import (
    MessageResponse,
    ProfileListResponse,
    ProfileResponse,
)

router = APIRouter(prefix="/admin/matrimonies", tags=["admin"])
logger = get_logger(__name__)


@router.get("", response_model=ProfileListResponse)
async def list_all_profiles(
    is_paid: Optional[bool] = None,
    is_hidden: Optional[bool] = None,
    is_completed: Optional[bool] = None,
    owner_id: Optional[uuid.UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Every profile, including hidden, unpaid and completed ones."""
    query = select(MatrimonyProfile)
    if is_paid is not None:
        query = query.where(MatrimonyProfile.is_paid.is_(is_paid))
    if is_hidden is not None:
        query = query.where(MatrimonyProfile.is_hidden.is_(is_hidden))
    if is_completed is not None:
        query = query.where(MatrimonyProfile.is_completed.is_(is_completed))
    if owner_id is not None:
        query = query.where(MatrimonyProfile.owner_id == owner_id)

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()
    result = await db.execute(
        query.order_by(MatrimonyProfile.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return ProfileListResponse(
        items=[ProfileResponse.model_validate(p) for p in result.scalars().all()],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


@router.post("/{profile_id}/mark-completed", response_model=ProfileResponse)
async def mark_completed(
    profile_id: uuid.UUID,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Hide the profile now and schedule its deletion after the grace period."""
    profile = await get_profile_or_404(db, profile_id)
    apply_transition(profile, Action.MARK_COMPLETED)
    await db.commit()
    await db.refresh(profile)

    logger.info(
        f"Admin {admin.id} marked profile {profile.id} completed; "
        f"deletion scheduled for {profile.scheduled_deletion.isoformat()}"
    )
    return profile


@router.patch("/{profile_id}/hide", response_model=ProfileResponse)
async def hide_profile(
    profile_id: uuid.UUID,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_profile_or_404(db, profile_id)
    apply_transition(profile, Action.HIDE)
    await db.commit()
    await db.refresh(profile)
    return profile


@router.patch("/{profile_id}/unhide", response_model=ProfileResponse)
async def unhide_profile(
    profile_id: uuid.UUID,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_profile_or_404(db, profile_id)
    apply_transition(profile, Action.UNHIDE)
    await db.commit()
    await db.refresh(profile)
    return profile


@router.delete("/{profile_id}", response_model=MessageResponse)
async def delete_profile(
    profile_id: uuid.UUID,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_profile_or_404(db, profile_id)
    apply_transition(profile, Action.DELETE)
    public_ids = [photo.get("public_id") for photo in profile.photos or []]

    await db.delete(profile)
    await db.commit()
    await destroy_images(public_ids)

    logger.info(f"Admin {admin.id} deleted profile {profile_id}")
    return MessageResponse(message="Profile deleted successfully")
