"""Owner-facing matrimony profile endpoints and public listings."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.access_gate import Requirement
from libs.auth.dependencies import enforce, require_approved
from libs.auth.models import AccountSnapshot
from libs.common.config import get_settings
from libs.common.datetime_utils import age_on
from libs.common.email import send_profile_activated_email
from libs.common.logging import get_logger
from libs.common.media_utils import destroy_images
from libs.db.session import get_async_db
from libs.matrimony.lifecycle import (
    Action,
    ProfileState,
    initial_flags,
    submitted_state,
    toggle_action,
)
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.matrimony_service.models import MatrimonyProfile
from services.matrimony_service.routers._helpers import (
    apply_transition,
    get_owned_profile,
    get_profile_or_404,
    owns_paid_profile,
    page_count,
    require_listing_access,
)
from services.matrimony_service.schemas import (
    Diet,
    Gender,
    MaritalStatus,
    MessageResponse,
    ProfileCreate,
    ProfileListResponse,
    ProfileResponse,
    ProfileUpdate,
)

router = APIRouter(prefix="/matrimony/profiles", tags=["matrimony"])
logger = get_logger(__name__)
settings = get_settings()


def listed_filter():
    """SQL form of the public-listing rule."""
    return (
        MatrimonyProfile.is_hidden.is_(False),
        MatrimonyProfile.scheduled_deletion.is_(None),
        or_(
            MatrimonyProfile.is_paid.is_(True),
            MatrimonyProfile.payment_required.is_(False),
        ),
    )


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: ProfileCreate,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Submit a completed wizard.

    Members get an active profile straight away; everyone else gets a
    profile pending payment. That decision is stored and never revisited.
    """
    state = submitted_state(account.is_member)
    data = payload.model_dump(mode="json", exclude={"photos", "date_of_birth"})
    profile = MatrimonyProfile(
        owner_id=uuid.UUID(account.id),
        date_of_birth=payload.date_of_birth,
        age=age_on(payload.date_of_birth),
        photos=[photo.model_dump(mode="json") for photo in payload.photos],
        **data,
        **initial_flags(account.is_member),
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)

    logger.info(
        f"Matrimony profile {profile.id} created by {account.id} ({state.value})"
    )
    if state is ProfileState.ACTIVE:
        await send_profile_activated_email(profile.email, profile.full_name, str(profile.id))
    return profile


@router.get("/mine", response_model=list[ProfileResponse])
async def list_my_profiles(
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(MatrimonyProfile)
        .where(MatrimonyProfile.owner_id == uuid.UUID(account.id))
        .order_by(MatrimonyProfile.created_at.desc())
    )
    return result.scalars().all()


@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    gender: Optional[Gender] = None,
    min_age: Optional[int] = Query(None, ge=18, le=100),
    max_age: Optional[int] = Query(None, ge=18, le=100),
    marital_status: Optional[MaritalStatus] = None,
    education: Optional[str] = Query(None, max_length=100),
    occupation: Optional[str] = Query(None, max_length=100),
    diet: Optional[Diet] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    _: AccountSnapshot = Depends(require_listing_access),
    db: AsyncSession = Depends(get_async_db),
):
    """Publicly listed profiles, newest first."""
    query = select(MatrimonyProfile).where(*listed_filter())
    if gender:
        query = query.where(MatrimonyProfile.gender == gender.value)
    if min_age is not None:
        query = query.where(MatrimonyProfile.age >= min_age)
    if max_age is not None:
        query = query.where(MatrimonyProfile.age <= max_age)
    if marital_status:
        query = query.where(MatrimonyProfile.marital_status == marital_status.value)
    if education:
        query = query.where(MatrimonyProfile.education.ilike(f"%{education}%"))
    if occupation:
        query = query.where(MatrimonyProfile.occupation.ilike(f"%{occupation}%"))
    if diet:
        query = query.where(MatrimonyProfile.diet == diet.value)

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


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: uuid.UUID,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Fetch one profile.

    Owners and admins see their profile in any state. Everyone else needs
    listing access and only sees listed profiles; each such view is counted.
    """
    profile = await get_profile_or_404(db, profile_id)
    if str(profile.owner_id) == account.id or account.is_admin:
        return profile

    owns_paid = account.is_member or await owns_paid_profile(db, account.id)
    enforce({Requirement.LISTINGS}, account, owns_paid_profile=owns_paid)
    if not profile.is_listed:
        # Unlisted profiles are indistinguishable from missing ones.
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    profile.view_count = (profile.view_count or 0) + 1
    await db.commit()
    await db.refresh(profile)
    return profile


@router.patch("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: uuid.UUID,
    payload: ProfileUpdate,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_owned_profile(db, profile_id, account)
    apply_transition(profile, Action.EDIT)

    changes = payload.model_dump(
        mode="json", exclude_unset=True, exclude={"photos", "date_of_birth"}
    )
    for field, value in changes.items():
        setattr(profile, field, value)
    if payload.date_of_birth is not None:
        profile.date_of_birth = payload.date_of_birth
        profile.age = age_on(payload.date_of_birth)
    if payload.photos is not None:
        profile.photos = [photo.model_dump(mode="json") for photo in payload.photos]

    await db.commit()
    await db.refresh(profile)
    return profile


@router.delete("/{profile_id}", response_model=MessageResponse)
async def delete_profile(
    profile_id: uuid.UUID,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    """Owner hard delete; hosted photos are removed as well."""
    profile = await get_owned_profile(db, profile_id, account)
    apply_transition(profile, Action.DELETE)
    public_ids = [photo.get("public_id") for photo in profile.photos or []]

    await db.delete(profile)
    await db.commit()
    await destroy_images(public_ids)

    logger.info(f"Matrimony profile {profile_id} deleted by owner {account.id}")
    return MessageResponse(message="Profile deleted successfully")


async def _set_visibility(
    db: AsyncSession, profile: MatrimonyProfile, action: Action
) -> MatrimonyProfile:
    apply_transition(profile, action)
    await db.commit()
    await db.refresh(profile)
    return profile


@router.patch("/{profile_id}/hide", response_model=ProfileResponse)
async def hide_profile(
    profile_id: uuid.UUID,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_owned_profile(db, profile_id, account)
    return await _set_visibility(db, profile, Action.HIDE)


@router.patch("/{profile_id}/unhide", response_model=ProfileResponse)
async def unhide_profile(
    profile_id: uuid.UUID,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_owned_profile(db, profile_id, account)
    return await _set_visibility(db, profile, Action.UNHIDE)


@router.post("/{profile_id}/toggle-hidden", response_model=ProfileResponse)
async def toggle_hidden(
    profile_id: uuid.UUID,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_owned_profile(db, profile_id, account)
    return await _set_visibility(db, profile, toggle_action(profile))
