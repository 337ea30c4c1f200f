"""Shared helper functions for matrimony service routers."""

import math
import uuid

from fastapi import Depends, HTTPException, status
from libs.auth.access_gate import Requirement
from libs.auth.dependencies import enforce, get_current_account
from libs.auth.models import AccountSnapshot
from libs.common.config import get_settings
from libs.common.error_handler import ServiceError
from libs.db.session import get_async_db
from libs.matrimony.lifecycle import Action, InvalidTransition, ProfileState, apply
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.matrimony_service.models import MatrimonyProfile

settings = get_settings()


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def get_profile_or_404(db: AsyncSession, profile_id: uuid.UUID) -> MatrimonyProfile:
    result = await db.execute(
        select(MatrimonyProfile).where(MatrimonyProfile.id == profile_id)
    )
    profile = result.scalar_one_or_none()
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return profile


async def get_owned_profile(
    db: AsyncSession, profile_id: uuid.UUID, account: AccountSnapshot
) -> MatrimonyProfile:
    """The profile if ``account`` owns it; 404 otherwise (no ownership leak)."""
    profile = await get_profile_or_404(db, profile_id)
    if str(profile.owner_id) != account.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return profile


async def owns_paid_profile(db: AsyncSession, owner_id: uuid.UUID | str) -> bool:
    if isinstance(owner_id, str):
        owner_id = uuid.UUID(owner_id)
    result = await db.execute(
        select(
            exists().where(
                MatrimonyProfile.owner_id == owner_id,
                MatrimonyProfile.is_paid.is_(True),
            )
        )
    )
    return bool(result.scalar())


async def require_listing_access(
    account: AccountSnapshot = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
) -> AccountSnapshot:
    """Members, owners of a paid profile and admins may browse listings."""
    owns_paid = False
    if not account.is_member and not account.is_admin:
        owns_paid = await owns_paid_profile(db, account.id)
    enforce(
        {Requirement.AUTH, Requirement.LISTINGS},
        account,
        owns_paid_profile=owns_paid,
    )
    return account


def apply_transition(profile: MatrimonyProfile, action: Action) -> ProfileState:
    """Apply a lifecycle action, mapping a forbidden transition to 409."""
    try:
        return apply(
            profile, action, grace_days=settings.MATRIMONY_DELETION_GRACE_DAYS
        )
    except InvalidTransition as e:
        raise ServiceError(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
            code="INVALID_TRANSITION",
        )
