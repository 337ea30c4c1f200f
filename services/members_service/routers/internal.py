"""Internal service-to-service endpoints for members-service.

These endpoints are authenticated with service_role JWT only.
They are NOT exposed through the gateway.
"""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_service_role
from libs.auth.models import AccountSnapshot, AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy.ext.asyncio import AsyncSession

from services.members_service.routers._helpers import get_account_or_404, to_snapshot
from services.members_service.schemas import MembershipActivation

router = APIRouter(prefix="/internal", tags=["internal"])
logger = get_logger(__name__)


@router.get("/accounts/{account_id}", response_model=AccountSnapshot)
async def get_account(
    account_id: uuid.UUID,
    _: AuthUser = Depends(require_service_role),
    db: AsyncSession = Depends(get_async_db),
):
    """Account flags for entitlement checks in other services."""
    account = await get_account_or_404(db, account_id)
    return to_snapshot(account)


@router.post("/accounts/{account_id}/membership", response_model=AccountSnapshot)
async def activate_membership(
    account_id: uuid.UUID,
    payload: MembershipActivation,
    caller: AuthUser = Depends(require_service_role),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Mark the account a lifetime member after a verified payment.

    Repeating the call for an existing member changes nothing.
    """
    account = await get_account_or_404(db, account_id)
    if account.is_member:
        return to_snapshot(account)

    account.is_member = True
    account.membership_paid_at = utc_now()
    account.membership_order_id = payload.order_id
    account.membership_payment_id = payload.payment_id
    account.membership_amount = payload.amount
    await db.commit()
    await db.refresh(account)

    logger.info(
        f"Membership activated for account {account.id} (order {payload.order_id}, "
        f"caller {caller.user_id})"
    )
    return to_snapshot(account)
