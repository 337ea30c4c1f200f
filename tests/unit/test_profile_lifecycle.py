"""Unit tests for the matrimony profile lifecycle and photo rules."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from itertools import product
from typing import Optional

import pytest

from libs.matrimony.lifecycle import (
    Action,
    InvalidTransition,
    PhotoRuleError,
    ProfileState,
    apply,
    can_apply,
    derive_state,
    initial_flags,
    is_publicly_listed,
    normalize_photos,
    require_submittable_photos,
    submitted_state,
    toggle_action,
)


@dataclass
class Flags:
    payment_required: bool = False
    is_paid: bool = True
    is_hidden: bool = False
    scheduled_deletion: Optional[datetime] = None
    is_completed: bool = False
    completed_date: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "payment_required,is_paid,is_hidden", list(product([False, True], repeat=3))
)
def test_listing_rule_over_every_flag_combination(payment_required, is_paid, is_hidden):
    profile = Flags(payment_required=payment_required, is_paid=is_paid, is_hidden=is_hidden)
    expected = not is_hidden and (is_paid or not payment_required)
    assert is_publicly_listed(profile) is expected


@pytest.mark.unit
def test_unpaid_profile_is_never_listed():
    assert not is_publicly_listed(Flags(payment_required=True, is_paid=False))


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_member_submission_is_active_and_free():
    assert submitted_state(owner_is_member=True) is ProfileState.ACTIVE
    assert initial_flags(owner_is_member=True) == {
        "payment_required": False,
        "is_paid": True,
        "is_hidden": False,
    }


@pytest.mark.unit
def test_non_member_submission_waits_for_payment():
    flags = initial_flags(owner_is_member=False)

    assert submitted_state(owner_is_member=False) is ProfileState.PENDING_PAYMENT
    assert flags["payment_required"] is True
    assert flags["is_paid"] is False
    assert derive_state(Flags(**flags)) is ProfileState.PENDING_PAYMENT


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_payment_activates_pending_profile():
    profile = Flags(payment_required=True, is_paid=False)

    assert apply(profile, Action.PAYMENT_VERIFIED) is ProfileState.ACTIVE
    assert profile.is_paid
    assert profile.payment_required  # decided once, never recomputed


@pytest.mark.unit
def test_pending_profile_cannot_be_hidden():
    profile = Flags(payment_required=True, is_paid=False)

    with pytest.raises(InvalidTransition):
        apply(profile, Action.HIDE)
    assert not profile.is_hidden


@pytest.mark.unit
def test_hide_and_unhide_round_trip():
    profile = Flags()

    assert apply(profile, toggle_action(profile)) is ProfileState.HIDDEN
    assert apply(profile, toggle_action(profile)) is ProfileState.ACTIVE
    assert not profile.is_hidden


@pytest.mark.unit
def test_mark_completed_hides_and_schedules_deletion():
    now = datetime(2026, 3, 1, tzinfo=timezone.utc)
    profile = Flags()

    state = apply(profile, Action.MARK_COMPLETED, now=now, grace_days=14)

    assert state is ProfileState.SCHEDULED_FOR_DELETION
    assert profile.is_hidden
    assert profile.is_completed
    assert profile.completed_date == now
    assert profile.scheduled_deletion == now + timedelta(days=14)
    assert not is_publicly_listed(profile)


@pytest.mark.unit
def test_scheduled_profile_cannot_be_unhidden():
    profile = Flags(is_hidden=True, scheduled_deletion=datetime.now(timezone.utc))

    with pytest.raises(InvalidTransition):
        apply(profile, Action.UNHIDE)


@pytest.mark.unit
def test_deleted_is_terminal():
    for action in Action:
        assert not can_apply(ProfileState.DELETED, action)


@pytest.mark.unit
@pytest.mark.parametrize(
    "state", [s for s in ProfileState if s is not ProfileState.DELETED]
)
def test_edit_allowed_in_every_live_state(state):
    assert can_apply(state, Action.EDIT)
    assert can_apply(state, Action.DELETE)


@pytest.mark.unit
def test_invalid_transition_message_names_state_and_action():
    with pytest.raises(InvalidTransition, match="Cannot hide a profile that is pending payment"):
        apply(Flags(payment_required=True, is_paid=False), Action.HIDE)


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------


def _photo(n: int, primary: bool = False) -> dict:
    return {"url": f"https://img/{n}.jpg", "public_id": f"p{n}", "is_primary": primary}


@pytest.mark.unit
def test_first_photo_becomes_primary_when_none_marked():
    photos = normalize_photos([_photo(1), _photo(2)])
    assert [p["is_primary"] for p in photos] == [True, False]


@pytest.mark.unit
def test_explicit_primary_is_kept():
    photos = normalize_photos([_photo(1), _photo(2, primary=True)])
    assert [p["is_primary"] for p in photos] == [False, True]


@pytest.mark.unit
def test_two_primaries_rejected():
    with pytest.raises(PhotoRuleError):
        normalize_photos([_photo(1, True), _photo(2, True)])


@pytest.mark.unit
def test_more_than_five_photos_rejected():
    with pytest.raises(PhotoRuleError, match="at most 5"):
        normalize_photos([_photo(n) for n in range(6)])


@pytest.mark.unit
def test_submission_needs_a_photo():
    with pytest.raises(PhotoRuleError, match="At least one photo"):
        require_submittable_photos([])
    assert normalize_photos([]) == []
