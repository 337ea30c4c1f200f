"""Unit tests for entitlement evaluation."""

from itertools import product

import pytest

from libs.auth.entitlements import Entitlement, evaluate
from libs.auth.models import AccountSnapshot


def _account(**flags) -> AccountSnapshot:
    return AccountSnapshot(id="acc-1", name="Asha", email="asha@test.com", **flags)


ALL_FLAG_COMBINATIONS = [
    dict(zip(("is_approved", "is_member", "is_admin", "is_suspended"), values))
    for values in product([False, True], repeat=4)
]


@pytest.mark.unit
@pytest.mark.parametrize("flags", ALL_FLAG_COMBINATIONS)
def test_suspended_account_is_blocked_whatever_else_is_set(flags):
    """Suspension removes every capability, even for admins and members."""
    flags = {**flags, "is_suspended": True}
    entitlement = evaluate(_account(**flags), owns_paid_profile=True)

    assert entitlement.is_blocked
    assert not entitlement.can_browse_listings
    assert not entitlement.can_create_free_profile
    assert not entitlement.must_pay_for_profile
    assert entitlement.is_admin == flags["is_admin"]


@pytest.mark.unit
@pytest.mark.parametrize("is_member", [False, True])
def test_unapproved_account_only_awaits_approval(is_member):
    entitlement = evaluate(
        _account(is_approved=False, is_member=is_member), owns_paid_profile=True
    )

    assert entitlement.awaiting_approval
    assert not entitlement.is_blocked
    assert not entitlement.can_browse_listings
    assert not entitlement.can_create_free_profile
    assert not entitlement.must_pay_for_profile


@pytest.mark.unit
def test_approved_member_browses_and_creates_for_free():
    entitlement = evaluate(_account(is_approved=True, is_member=True))

    assert entitlement == Entitlement(
        can_browse_listings=True,
        can_create_free_profile=True,
        must_pay_for_profile=False,
    )


@pytest.mark.unit
def test_approved_non_member_must_pay_and_cannot_browse():
    entitlement = evaluate(_account(is_approved=True))

    assert entitlement.must_pay_for_profile
    assert not entitlement.can_create_free_profile
    assert not entitlement.can_browse_listings


@pytest.mark.unit
def test_paid_profile_opens_listings_for_non_member():
    entitlement = evaluate(_account(is_approved=True), owns_paid_profile=True)

    assert entitlement.can_browse_listings
    assert entitlement.must_pay_for_profile
    assert not entitlement.can_create_free_profile


@pytest.mark.unit
@pytest.mark.parametrize("flags", ALL_FLAG_COMBINATIONS)
def test_evaluate_is_deterministic(flags):
    account = _account(**flags)
    assert evaluate(account) == evaluate(account)


@pytest.mark.unit
@pytest.mark.parametrize("flags", ALL_FLAG_COMBINATIONS)
def test_free_creation_and_payment_are_exclusive(flags):
    entitlement = evaluate(_account(**flags))
    assert not (entitlement.can_create_free_profile and entitlement.must_pay_for_profile)
