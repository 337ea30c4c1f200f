"""Route-level guard applying an Entitlement to a set of requirements.

Shared by the services (mapped to 401/403 responses) and by the portal
navigator (mapped to render, redirect or interstitial).
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from libs.auth.entitlements import Entitlement

LOGIN_PATH = "/login"
JOIN_US_PATH = "/joinus"
HOME_PATH = "/"


class Requirement(str, enum.Enum):
    AUTH = "auth"
    APPROVAL = "approval"
    MEMBER = "member"
    LISTINGS = "listings"
    ADMIN = "admin"


class GateReason(str, enum.Enum):
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    ACCOUNT_SUSPENDED = "ACCOUNT_SUSPENDED"
    APPROVAL_PENDING = "APPROVAL_PENDING"
    MEMBERSHIP_REQUIRED = "MEMBERSHIP_REQUIRED"
    LISTING_ACCESS_REQUIRED = "LISTING_ACCESS_REQUIRED"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"


@dataclass(frozen=True)
class Render:
    pass


@dataclass(frozen=True)
class Redirect:
    target: str
    reason: GateReason


@dataclass(frozen=True)
class Interstitial:
    reason: GateReason


Decision = Union[Render, Redirect, Interstitial]

# Member and listing access are only meaningful for vetted accounts.
_IMPLIES_APPROVAL = {Requirement.APPROVAL, Requirement.MEMBER, Requirement.LISTINGS}


def decide(
    requirements: Iterable[Requirement], entitlement: Optional[Entitlement]
) -> Decision:
    """
    Decide how a protected view responds to the current entitlement.

    ``entitlement`` is None for anonymous visitors. Checks run in a fixed
    order: suspension (interstitial, so the user sees why), authentication,
    approval, then membership, listing access and admin. Administrators
    pass approval, membership and listing checks but not suspension.
    """
    required = set(requirements)
    if not required:
        return Render()
    required.add(Requirement.AUTH)

    if entitlement is not None and entitlement.is_blocked:
        return Interstitial(GateReason.ACCOUNT_SUSPENDED)

    if entitlement is None:
        return Redirect(LOGIN_PATH, GateReason.NOT_AUTHENTICATED)

    is_admin = entitlement.is_admin

    if required & _IMPLIES_APPROVAL and entitlement.awaiting_approval and not is_admin:
        return Interstitial(GateReason.APPROVAL_PENDING)

    # For approved accounts, free profile creation is exactly membership.
    if (
        Requirement.MEMBER in required
        and not entitlement.can_create_free_profile
        and not is_admin
    ):
        return Redirect(JOIN_US_PATH, GateReason.MEMBERSHIP_REQUIRED)

    if (
        Requirement.LISTINGS in required
        and not entitlement.can_browse_listings
        and not is_admin
    ):
        return Redirect(JOIN_US_PATH, GateReason.LISTING_ACCESS_REQUIRED)

    if Requirement.ADMIN in required and not is_admin:
        return Redirect(HOME_PATH, GateReason.ADMIN_REQUIRED)

    return Render()
