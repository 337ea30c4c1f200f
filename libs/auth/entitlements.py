"""Capability set derived from an account's flags.

``evaluate`` is a pure function: the same snapshot always yields the same
``Entitlement`` and nothing is read or written along the way.
"""

from dataclasses import dataclass
from typing import Protocol


class AccountFlags(Protocol):
    is_approved: bool
    is_member: bool
    is_admin: bool
    is_suspended: bool


@dataclass(frozen=True)
class Entitlement:
    can_browse_listings: bool = False
    can_create_free_profile: bool = False
    must_pay_for_profile: bool = False
    is_blocked: bool = False
    is_admin: bool = False
    awaiting_approval: bool = False


def evaluate(account: AccountFlags, *, owns_paid_profile: bool = False) -> Entitlement:
    """
    Map account flags to capabilities.

    Rules in priority order:
        1. Suspended accounts are blocked and get nothing else.
        2. Unapproved accounts only see their pending-approval status.
        3. Approved members create profiles for free; approved non-members
           must pay. Listings open to members and to owners of a paid profile.

    ``is_admin`` mirrors the account flag in every case. Suspension still
    wins at the access gate, which checks ``is_blocked`` first.
    """
    is_admin = bool(account.is_admin)

    if account.is_suspended:
        return Entitlement(is_blocked=True, is_admin=is_admin)

    if not account.is_approved:
        return Entitlement(is_admin=is_admin, awaiting_approval=True)

    return Entitlement(
        can_browse_listings=bool(account.is_member or owns_paid_profile),
        can_create_free_profile=bool(account.is_member),
        must_pay_for_profile=not account.is_member,
        is_admin=is_admin,
    )
