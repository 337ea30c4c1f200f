from typing import Annotated, Optional

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError

from libs.auth.access_gate import GateReason, Interstitial, Redirect, Requirement, decide
from libs.auth.entitlements import Entitlement, evaluate
from libs.auth.models import AccountSnapshot, AuthUser
from libs.auth.security import decode_token
from libs.common import service_client
from libs.common.error_handler import ServiceError
from libs.common.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)

_REASON_DETAILS = {
    GateReason.NOT_AUTHENTICATED: "Authentication required",
    GateReason.ACCOUNT_SUSPENDED: "Your account has been suspended",
    GateReason.APPROVAL_PENDING: "Your account is pending approval",
    GateReason.MEMBERSHIP_REQUIRED: "Lifetime membership required",
    GateReason.LISTING_ACCESS_REQUIRED: (
        "Become a member or activate a matrimony profile to browse listings"
    ),
    GateReason.ADMIN_REQUIRED: "Admin privileges required",
}


def _credentials_exception() -> ServiceError:
    return ServiceError(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        code=GateReason.NOT_AUTHENTICATED.value,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_optional_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[AuthUser]:
    """Validated claims if a bearer token was sent, otherwise None."""
    if token is None:
        return None
    try:
        payload = decode_token(token.credentials)
        return AuthUser(**payload)
    except (JWTError, ValidationError):
        raise _credentials_exception()


async def get_current_user(
    user: Annotated[Optional[AuthUser], Depends(get_optional_user)],
) -> AuthUser:
    """
    Validate the bearer JWT and return the authenticated user.
    """
    if user is None:
        raise _credentials_exception()
    return user


async def require_service_role(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """Only other backend services (service_role tokens) may call."""
    if not current_user.is_service:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Service role required",
        )
    return current_user


async def get_current_account(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AccountSnapshot:
    """
    Load the caller's account from the members service.

    Flags are always read fresh so approval, membership and suspension
    changes apply on the very next request.
    """
    if current_user.is_service:
        raise _credentials_exception()
    try:
        data = await service_client.get_account(
            current_user.user_id, calling_service="auth"
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Account lookup failed for {current_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Account service unavailable",
        )
    if data is None:
        raise _credentials_exception()
    return AccountSnapshot(**data)


def enforce(
    requirements: set[Requirement],
    account: AccountSnapshot,
    *,
    owns_paid_profile: bool = False,
) -> Entitlement:
    """
    Apply the access gate for an API request.

    Returns the entitlement on success; raises a 401/403 ServiceError with a
    machine-readable code otherwise.
    """
    entitlement = evaluate(account, owns_paid_profile=owns_paid_profile)
    decision = decide(requirements, entitlement)
    if isinstance(decision, (Redirect, Interstitial)):
        reason = decision.reason
        detail = _REASON_DETAILS[reason]
        if reason is GateReason.ACCOUNT_SUSPENDED and account.suspension_reason:
            detail = f"{detail}: {account.suspension_reason}"
        raise ServiceError(
            status_code=(
                status.HTTP_401_UNAUTHORIZED
                if reason is GateReason.NOT_AUTHENTICATED
                else status.HTTP_403_FORBIDDEN
            ),
            detail=detail,
            code=reason.value,
        )
    return entitlement


def require_access(*requirements: Requirement):
    """
    Dependency factory: the caller's account, gated on ``requirements``.

    Usage:
        account: AccountSnapshot = Depends(require_access(Requirement.ADMIN))
    """
    required = set(requirements) | {Requirement.AUTH}

    async def dependency(
        account: Annotated[AccountSnapshot, Depends(get_current_account)],
    ) -> AccountSnapshot:
        enforce(required, account)
        return account

    return dependency


require_active_account = require_access(Requirement.AUTH)
require_approved = require_access(Requirement.APPROVAL)
require_admin = require_access(Requirement.ADMIN)
