"""Internal service-to-service endpoints for matrimony-service.

These endpoints are authenticated with service_role JWT only.
They are NOT exposed through the gateway.
"""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_service_role
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.email import send_profile_activated_email
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from libs.matrimony.lifecycle import Action
from sqlalchemy.ext.asyncio import AsyncSession

from services.matrimony_service.routers._helpers import (
    apply_transition,
    get_profile_or_404,
    owns_paid_profile,
)
from services.matrimony_service.schemas import PaymentRecord, ProfilePaymentStatus

router = APIRouter(prefix="/internal", tags=["internal"])
logger = get_logger(__name__)


@router.get("/profiles/{profile_id}", response_model=ProfilePaymentStatus)
async def get_profile_payment_status(
    profile_id: uuid.UUID,
    _: AuthUser = Depends(require_service_role),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_profile_or_404(db, profile_id)


@router.post("/profiles/{profile_id}/paid", response_model=ProfilePaymentStatus)
async def mark_profile_paid(
    profile_id: uuid.UUID,
    payload: PaymentRecord,
    caller: AuthUser = Depends(require_service_role),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Activate a profile after a verified payment.

    A profile that is already paid is returned unchanged.
    """
    profile = await get_profile_or_404(db, profile_id)
    if profile.is_paid:
        return profile

    apply_transition(profile, Action.PAYMENT_VERIFIED)
    profile.payment_order_id = payload.order_id
    profile.payment_id = payload.payment_id
    profile.payment_amount = payload.amount
    profile.paid_at = utc_now()
    await db.commit()
    await db.refresh(profile)

    logger.info(
        f"Profile {profile.id} activated by payment {payload.payment_id} "
        f"(caller {caller.user_id})"
    )
    await send_profile_activated_email(profile.email, profile.full_name, str(profile.id))
    return profile


@router.get("/accounts/{account_id}/owns-paid-profile")
async def get_owns_paid_profile(
    account_id: uuid.UUID,
    _: AuthUser = Depends(require_service_role),
    db: AsyncSession = Depends(get_async_db),
) -> dict[str, bool]:
    return {"owns_paid_profile": await owns_paid_profile(db, account_id)}
