"""Admin account management: approval queue, suspension, roles."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.common.datetime_utils import utc_now
from libs.common.email import send_welcome_email
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.members_service.models import Account
from services.members_service.routers._helpers import (
    get_account_or_404,
    page_count,
    require_admin_account,
)
from services.members_service.schemas import (
    AccountListResponse,
    AccountResponse,
    BulkActionRequest,
    BulkActionResponse,
    MarkMemberRequest,
    MessageResponse,
    SuspendRequest,
)

router = APIRouter(prefix="/admin/users", tags=["admin"])
logger = get_logger(__name__)


async def _list_accounts(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    is_approved: Optional[bool] = None,
    is_member: Optional[bool] = None,
    is_suspended: Optional[bool] = None,
    search: Optional[str] = None,
) -> AccountListResponse:
    query = select(Account)
    if is_approved is not None:
        query = query.where(Account.is_approved.is_(is_approved))
    if is_member is not None:
        query = query.where(Account.is_member.is_(is_member))
    if is_suspended is not None:
        query = query.where(Account.is_suspended.is_(is_suspended))
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(func.lower(Account.name).like(pattern), Account.email.like(pattern))
        )

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()
    result = await db.execute(
        query.order_by(Account.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return AccountListResponse(
        items=[AccountResponse.model_validate(a) for a in result.scalars().all()],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


@router.get("", response_model=AccountListResponse)
async def list_accounts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    is_approved: Optional[bool] = None,
    is_member: Optional[bool] = None,
    is_suspended: Optional[bool] = None,
    search: Optional[str] = Query(None, max_length=100),
    _: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    """List accounts with optional approval/membership/suspension filters."""
    return await _list_accounts(
        db,
        page=page,
        limit=limit,
        is_approved=is_approved,
        is_member=is_member,
        is_suspended=is_suspended,
        search=search,
    )


@router.get("/pending", response_model=AccountListResponse)
async def list_pending_accounts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    return await _list_accounts(db, page=page, limit=limit, is_approved=False)


@router.post("/bulk-approve", response_model=BulkActionResponse)
async def bulk_approve(
    payload: BulkActionRequest,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Approve many pending accounts; reports only the aggregate count."""
    ids = set(payload.account_ids)
    result = await db.execute(
        select(Account).where(Account.id.in_(ids), Account.is_approved.is_(False))
    )
    accounts = result.scalars().all()
    now = utc_now()
    for account in accounts:
        account.is_approved = True
        account.approved_at = now
    await db.commit()

    for account in accounts:
        await send_welcome_email(account.email, account.name)

    logger.info(f"Admin {admin.id} bulk-approved {len(accounts)}/{len(ids)} accounts")
    return BulkActionResponse(
        message=f"{len(accounts)} users approved",
        requested=len(ids),
        processed=len(accounts),
    )


@router.post("/bulk-reject", response_model=BulkActionResponse)
async def bulk_reject(
    payload: BulkActionRequest,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete many pending accounts; reports only the aggregate count."""
    ids = set(payload.account_ids)
    result = await db.execute(
        delete(Account).where(Account.id.in_(ids), Account.is_approved.is_(False))
    )
    await db.commit()

    processed = result.rowcount or 0
    logger.info(f"Admin {admin.id} bulk-rejected {processed}/{len(ids)} accounts")
    return BulkActionResponse(
        message=f"{processed} users rejected",
        requested=len(ids),
        processed=processed,
    )


@router.post("/{account_id}/approve", response_model=AccountResponse)
async def approve_account(
    account_id: uuid.UUID,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Approve a pending registration and send the welcome e-mail."""
    account = await get_account_or_404(db, account_id)
    if account.is_approved:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already approved",
        )

    account.is_approved = True
    account.approved_at = utc_now()
    await db.commit()
    await db.refresh(account)

    logger.info(f"Admin {admin.id} approved account {account.id}")
    await send_welcome_email(account.email, account.name)
    return account


@router.post("/{account_id}/reject", response_model=MessageResponse)
async def reject_account(
    account_id: uuid.UUID,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Reject a pending registration; the account is removed."""
    account = await get_account_or_404(db, account_id)
    if account.is_approved:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot reject an approved user",
        )

    await db.delete(account)
    await db.commit()
    logger.info(f"Admin {admin.id} rejected account {account_id}")
    return MessageResponse(message="User rejected")


@router.post("/{account_id}/suspend", response_model=AccountResponse)
async def suspend_account(
    account_id: uuid.UUID,
    payload: SuspendRequest,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    account = await get_account_or_404(db, account_id)
    if account.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot suspend your own account",
        )

    account.is_suspended = True
    account.suspension_reason = payload.reason
    account.suspended_at = utc_now()
    await db.commit()
    await db.refresh(account)

    logger.info(f"Admin {admin.id} suspended account {account.id}")
    return account


@router.post("/{account_id}/unsuspend", response_model=AccountResponse)
async def unsuspend_account(
    account_id: uuid.UUID,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    account = await get_account_or_404(db, account_id)
    account.is_suspended = False
    account.suspension_reason = None
    account.suspended_at = None
    await db.commit()
    await db.refresh(account)

    logger.info(f"Admin {admin.id} unsuspended account {account.id}")
    return account


@router.post("/{account_id}/make-admin", response_model=AccountResponse)
async def grant_admin(
    account_id: uuid.UUID,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    account = await get_account_or_404(db, account_id)
    account.is_admin = True
    await db.commit()
    await db.refresh(account)

    logger.info(f"Admin {admin.id} granted admin to account {account.id}")
    return account


@router.post("/{account_id}/mark-member", response_model=AccountResponse)
async def mark_member(
    account_id: uuid.UUID,
    payload: Optional[MarkMemberRequest] = None,
    admin: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Record a membership paid outside the payment gateway."""
    account = await get_account_or_404(db, account_id)
    if account.is_member:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already a member",
        )

    account.is_member = True
    account.membership_paid_at = utc_now()
    await db.commit()
    await db.refresh(account)

    note = f" ({payload.note})" if payload and payload.note else ""
    logger.info(f"Admin {admin.id} marked account {account.id} as member{note}")
    return account
