"""Owned application state for one portal session.

Holds the token, the cached account and the caller's own profiles, plus the
notices and pending redirect that views read. Entitlement is always computed
from the cached snapshot, so callers refresh the snapshot after any mutation.
"""

from dataclasses import dataclass, field
from typing import Optional

from libs.auth.entitlements import Entitlement, evaluate
from libs.auth.models import AccountSnapshot

from portal.errors import Notice


@dataclass(frozen=True)
class Ticket:
    """Marks one in-flight request for a flow (e.g. "profile-view")."""

    key: str
    generation: int


@dataclass
class AppState:
    token: Optional[str] = None
    account: Optional[AccountSnapshot] = None
    my_profiles: list[dict] = field(default_factory=list)
    notices: list[Notice] = field(default_factory=list)
    redirect: Optional[str] = None
    _generations: dict[str, int] = field(default_factory=dict, repr=False)

    # ------------------------------------------------------------------
    # Stale-response guard
    # ------------------------------------------------------------------

    def begin(self, key: str) -> Ticket:
        """Start a request for ``key``; earlier tickets for it go stale."""
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        return Ticket(key, generation)

    def abandon(self, key: str) -> None:
        """The user left the flow; every outstanding ticket goes stale."""
        self._generations[key] = self._generations.get(key, 0) + 1

    def is_current(self, ticket: Ticket) -> bool:
        return self._generations.get(ticket.key) == ticket.generation

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.account is not None

    def sign_in(self, token: str, account: AccountSnapshot) -> None:
        self.token = token
        self.account = account
        self.my_profiles = []

    def sign_out(self) -> None:
        self.token = None
        self.account = None
        self.my_profiles = []
        # Responses for the old session must not land in the new one.
        for key in list(self._generations):
            self.abandon(key)

    def set_account(self, account: AccountSnapshot) -> None:
        self.account = account

    def set_my_profiles(self, profiles: list[dict]) -> None:
        self.my_profiles = list(profiles)

    def replace_profile(self, profile: dict) -> None:
        """Swap in a freshly fetched copy of one of the caller's profiles."""
        for i, existing in enumerate(self.my_profiles):
            if existing["id"] == profile["id"]:
                self.my_profiles[i] = profile
                return
        self.my_profiles.append(profile)

    def drop_profile(self, profile_id: str) -> None:
        self.my_profiles = [p for p in self.my_profiles if p["id"] != profile_id]

    @property
    def owns_paid_profile(self) -> bool:
        return any(p.get("is_paid") for p in self.my_profiles)

    @property
    def entitlement(self) -> Optional[Entitlement]:
        """Capabilities for the cached account, None when signed out."""
        if not self.is_authenticated:
            return None
        return evaluate(self.account, owns_paid_profile=self.owns_paid_profile)

    # ------------------------------------------------------------------
    # Notices and navigation requests
    # ------------------------------------------------------------------

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    def take_notices(self) -> list[Notice]:
        notices, self.notices = self.notices, []
        return notices

    def redirect_to(self, path: str) -> None:
        self.redirect = path
