"""Matrimony profile lifecycle.

Profiles are stored as boolean flags (payment_required, is_paid, is_hidden,
scheduled_deletion). This module derives an explicit state from those flags
and owns the only code paths allowed to change them:

    Draft -> PendingPayment | Active          (submit)
    PendingPayment -> Active                  (payment verified)
    Active <-> Hidden                         (hide / unhide)
    Active | Hidden -> ScheduledForDeletion   (mark completed)
    any non-terminal -> Deleted               (delete)

Editing profile fields is allowed in every state but Deleted and never
touches the payment flags.
"""

import enum
from datetime import datetime, timedelta
from typing import Any, Optional, Protocol

from libs.common.datetime_utils import utc_now

DELETION_GRACE_DAYS = 14
MAX_PHOTOS = 5


class ProfileState(str, enum.Enum):
    DRAFT = "draft"
    PENDING_PAYMENT = "pending_payment"
    ACTIVE = "active"
    HIDDEN = "hidden"
    SCHEDULED_FOR_DELETION = "scheduled_for_deletion"
    DELETED = "deleted"


class Action(str, enum.Enum):
    SUBMIT = "submit"
    PAYMENT_VERIFIED = "payment_verified"
    HIDE = "hide"
    UNHIDE = "unhide"
    MARK_COMPLETED = "mark_completed"
    DELETE = "delete"
    EDIT = "edit"


class InvalidTransition(Exception):
    """Action not allowed from the profile's current state."""

    def __init__(self, state: ProfileState, action: Action):
        self.state = state
        self.action = action
        verb = action.value.replace("_", " ")
        super().__init__(f"Cannot {verb} a profile that is {state.value.replace('_', ' ')}")


class PhotoRuleError(ValueError):
    """Photo list violates the count or primary-photo rules."""


class ProfileFlags(Protocol):
    payment_required: bool
    is_paid: bool
    is_hidden: bool
    scheduled_deletion: Optional[datetime]


# Target state per (state, action); None means "stays in the same state".
_TRANSITIONS: dict[ProfileState, dict[Action, Optional[ProfileState]]] = {
    ProfileState.DRAFT: {
        Action.SUBMIT: None,  # resolved from the owner's membership
        Action.EDIT: None,
        Action.DELETE: ProfileState.DELETED,
    },
    ProfileState.PENDING_PAYMENT: {
        Action.PAYMENT_VERIFIED: ProfileState.ACTIVE,
        Action.EDIT: None,
        Action.DELETE: ProfileState.DELETED,
    },
    ProfileState.ACTIVE: {
        Action.HIDE: ProfileState.HIDDEN,
        Action.MARK_COMPLETED: ProfileState.SCHEDULED_FOR_DELETION,
        Action.EDIT: None,
        Action.DELETE: ProfileState.DELETED,
    },
    ProfileState.HIDDEN: {
        Action.UNHIDE: ProfileState.ACTIVE,
        Action.MARK_COMPLETED: ProfileState.SCHEDULED_FOR_DELETION,
        Action.EDIT: None,
        Action.DELETE: ProfileState.DELETED,
    },
    ProfileState.SCHEDULED_FOR_DELETION: {
        Action.EDIT: None,
        Action.DELETE: ProfileState.DELETED,
    },
    ProfileState.DELETED: {},
}


def derive_state(profile: ProfileFlags) -> ProfileState:
    """Explicit lifecycle state of a stored profile."""
    if profile.scheduled_deletion is not None:
        return ProfileState.SCHEDULED_FOR_DELETION
    if profile.payment_required and not profile.is_paid:
        return ProfileState.PENDING_PAYMENT
    if profile.is_hidden:
        return ProfileState.HIDDEN
    return ProfileState.ACTIVE


def is_publicly_listed(profile: ProfileFlags) -> bool:
    """Listed iff not hidden and either paid or free."""
    return not profile.is_hidden and (profile.is_paid or not profile.payment_required)


def can_apply(state: ProfileState, action: Action) -> bool:
    return action in _TRANSITIONS[state]


def ensure_allowed(state: ProfileState, action: Action) -> None:
    if not can_apply(state, action):
        raise InvalidTransition(state, action)


def initial_flags(owner_is_member: bool) -> dict[str, bool]:
    """
    Payment flags for a newly submitted profile.

    ``payment_required`` is decided once here from the owner's membership
    and is never recomputed afterwards.
    """
    payment_required = not owner_is_member
    return {
        "payment_required": payment_required,
        "is_paid": not payment_required,
        "is_hidden": False,
    }


def submitted_state(owner_is_member: bool) -> ProfileState:
    ensure_allowed(ProfileState.DRAFT, Action.SUBMIT)
    return ProfileState.ACTIVE if owner_is_member else ProfileState.PENDING_PAYMENT


def apply(
    profile: Any,
    action: Action,
    *,
    now: Optional[datetime] = None,
    grace_days: int = DELETION_GRACE_DAYS,
) -> ProfileState:
    """
    Apply ``action`` to a stored profile, mutating its flags in place.

    Raises:
        InvalidTransition: when the action is not allowed from the current state.

    Returns:
        The profile's state after the action.
    """
    state = derive_state(profile)
    ensure_allowed(state, action)

    if action is Action.PAYMENT_VERIFIED:
        profile.is_paid = True
    elif action is Action.HIDE:
        profile.is_hidden = True
    elif action is Action.UNHIDE:
        profile.is_hidden = False
    elif action is Action.MARK_COMPLETED:
        now = now or utc_now()
        profile.is_hidden = True
        profile.is_completed = True
        profile.completed_date = now
        profile.scheduled_deletion = now + timedelta(days=grace_days)
    elif action is Action.DELETE:
        return ProfileState.DELETED

    return derive_state(profile)


def toggle_action(profile: ProfileFlags) -> Action:
    """HIDE or UNHIDE depending on the current visibility flag."""
    return Action.UNHIDE if profile.is_hidden else Action.HIDE


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------


def normalize_photos(photos: list[dict], max_photos: int = MAX_PHOTOS) -> list[dict]:
    """
    Validate an ordered photo list and settle the primary photo.

    At most ``max_photos`` entries and at most one marked primary; when
    photos exist but none is primary, the first becomes primary.
    """
    if len(photos) > max_photos:
        raise PhotoRuleError(f"A profile can have at most {max_photos} photos")

    primaries = sum(1 for photo in photos if photo.get("is_primary"))
    if primaries > 1:
        raise PhotoRuleError("Only one photo can be marked as primary")

    normalized = [dict(photo) for photo in photos]
    if normalized and primaries == 0:
        normalized[0]["is_primary"] = True
    for photo in normalized:
        photo["is_primary"] = bool(photo.get("is_primary"))
    return normalized


def require_submittable_photos(photos: list[dict], max_photos: int = MAX_PHOTOS) -> list[dict]:
    """Photo rules for submission: at least one photo is mandatory."""
    if not photos:
        raise PhotoRuleError("At least one photo is required")
    return normalize_photos(photos, max_photos)
