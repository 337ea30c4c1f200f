"""Shared helper functions for members service routers."""

import math
import uuid

from fastapi import Depends, HTTPException, status
from libs.auth.access_gate import Requirement
from libs.auth.dependencies import enforce, get_current_user
from libs.auth.models import AccountSnapshot, AuthUser
from libs.db.session import get_async_db
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.members_service.models import Account


def to_snapshot(account: Account) -> AccountSnapshot:
    return AccountSnapshot(
        id=str(account.id),
        name=account.name,
        email=account.email,
        phone=account.phone,
        is_approved=account.is_approved,
        is_member=account.is_member,
        is_admin=account.is_admin,
        is_suspended=account.is_suspended,
        suspension_reason=account.suspension_reason,
        suspended_at=account.suspended_at,
        created_at=account.created_at,
    )


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def get_account_or_404(db: AsyncSession, account_id: uuid.UUID) -> Account:
    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()
    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found",
        )
    return account


async def get_account_by_email(db: AsyncSession, email: str) -> Account | None:
    result = await db.execute(select(Account).where(Account.email == email.lower()))
    return result.scalar_one_or_none()


async def get_current_account_row(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> Account:
    """The caller's Account row, read from this service's own tables."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if current_user.is_service:
        raise credentials_exception
    try:
        account_id = uuid.UUID(current_user.user_id)
    except ValueError:
        raise credentials_exception
    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()
    if not account:
        raise credentials_exception
    return account


async def require_admin_account(
    account: Account = Depends(get_current_account_row),
) -> Account:
    enforce({Requirement.AUTH, Requirement.ADMIN}, to_snapshot(account))
    return account
