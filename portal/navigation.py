"""Route table and navigation through the access gate."""

from dataclasses import dataclass
from typing import Optional

from libs.auth.access_gate import (
    Decision,
    GateReason,
    Interstitial,
    Redirect,
    Render,
    Requirement,
    decide,
)
from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger

from portal.api import ApiClient
from portal.errors import Notice
from portal.session import SessionActions
from portal.state import AppState

logger = get_logger(__name__)

AUTH = Requirement.AUTH
APPROVAL = Requirement.APPROVAL
LISTINGS = Requirement.LISTINGS
ADMIN = Requirement.ADMIN


@dataclass(frozen=True)
class Route:
    name: str
    path: str
    requirements: frozenset = frozenset()


ROUTES = {
    route.name: route
    for route in (
        Route("home", "/"),
        Route("login", "/login"),
        Route("reset-password", "/reset-password"),
        Route("events", "/events"),
        Route("gallery", "/gallery"),
        Route("account", "/account", frozenset({AUTH})),
        Route("join-us", "/joinus", frozenset({AUTH, APPROVAL})),
        Route("matrimony", "/matrimony"),
        Route("matrimony-list", "/matrimony/profiles", frozenset({AUTH, APPROVAL, LISTINGS})),
        Route("matrimony-create", "/matrimony/create", frozenset({AUTH, APPROVAL})),
        Route("matrimony-edit", "/matrimony/edit/{id}", frozenset({AUTH, APPROVAL})),
        Route("matrimony-profile", "/matrimony/profile/{id}", frozenset({AUTH, APPROVAL, LISTINGS})),
        Route("admin", "/admin", frozenset({AUTH, ADMIN})),
        Route("admin-users", "/admin/users", frozenset({AUTH, ADMIN})),
        Route("admin-matrimonies", "/admin/matrimonies", frozenset({AUTH, ADMIN})),
    )
}

INTERSTITIAL_MESSAGES = {
    GateReason.ACCOUNT_SUSPENDED: (
        "Your account has been suspended. Please contact admin for more information."
    ),
    GateReason.APPROVAL_PENDING: (
        "Your account is awaiting admin approval. "
        "You will be notified once your account is approved."
    ),
}


class Navigator:
    """Decides what each route shows for the current session."""

    def __init__(self, state: AppState, api: Optional[ApiClient] = None):
        self.state = state
        self.api = api

    def resolve(self, name: str) -> Decision:
        """Gate decision from cached state only. Never touches the network."""
        route = ROUTES[name]
        return decide(route.requirements, self.state.entitlement)

    async def navigate(self, name: str, *, refresh: bool = True) -> Decision:
        """
        Gate decision for ``name``, re-reading the account first when asked.

        Suspended sessions are answered from the cache: gated routes get the
        suspension interstitial and cause no API traffic. Public routes still
        render.
        """
        route = ROUTES[name]
        cached = self.state.entitlement
        if route.requirements and cached is not None and cached.is_blocked:
            return Interstitial(GateReason.ACCOUNT_SUSPENDED)

        if refresh and route.requirements and self.state.is_authenticated and self.api:
            await self._refresh_account()

        decision = decide(route.requirements, self.state.entitlement)
        if isinstance(decision, Redirect):
            logger.info(f"Route {name} redirects to {decision.target} ({decision.reason.value})")
            self.state.redirect_to(decision.target)
        return decision

    async def _refresh_account(self) -> None:
        await SessionActions(self.api, self.state).refresh()


def interstitial_notice(decision: Decision, account: Optional[AccountSnapshot] = None) -> Optional[Notice]:
    """The message an interstitial shows; includes the suspension reason."""
    if not isinstance(decision, Interstitial):
        return None
    message = INTERSTITIAL_MESSAGES[decision.reason]
    if (
        decision.reason is GateReason.ACCOUNT_SUSPENDED
        and account is not None
        and account.suspension_reason
    ):
        message = f"{message} Reason: {account.suspension_reason}"
    return Notice("warning", message)


__all__ = [
    "Navigator",
    "ROUTES",
    "Render",
    "Redirect",
    "Interstitial",
    "interstitial_notice",
]
