"""Matrimony browsing and owner actions."""

from typing import Optional

from libs.common.logging import get_logger

from portal.api import ApiClient
from portal.errors import AccessDenied, Notice, NotFound, PortalError
from portal.state import AppState

logger = get_logger(__name__)

LISTING_PATH = "/matrimony/profiles"


class MatrimonyActions:
    def __init__(self, api: ApiClient, state: AppState):
        self.api = api
        self.state = state
        self.listing: Optional[dict] = None
        self.viewing: Optional[dict] = None

    async def browse(self, page: int = 1, **filters) -> bool:
        ticket = self.state.begin("matrimony-list")
        try:
            listing = await self.api.list_profiles(page=page, **filters)
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        if not self.state.is_current(ticket):
            return False
        self.listing = listing
        return True

    async def view(self, profile_id: str) -> Optional[dict]:
        """Open one profile. A response for a profile the user already left
        is dropped."""
        ticket = self.state.begin("matrimony-view")
        try:
            profile = await self.api.get_profile(profile_id)
        except NotFound as e:
            self.state.notify(e.notice)
            self.state.redirect_to(LISTING_PATH)
            return None
        except PortalError as e:
            self.state.notify(e.notice)
            return None
        if not self.state.is_current(ticket):
            logger.debug(f"Dropping stale response for profile {profile_id}")
            return None
        self.viewing = profile
        return profile

    def leave_view(self) -> None:
        self.state.abandon("matrimony-view")
        self.viewing = None

    async def load_mine(self) -> bool:
        ticket = self.state.begin("my-profiles")
        try:
            profiles = await self.api.my_profiles()
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        if self.state.is_current(ticket):
            self.state.set_my_profiles(profiles)
        return True

    async def edit(self, profile_id: str, changes: dict) -> Optional[dict]:
        """
        Save owner edits.

        Payment flags are never sent. If the API says the profile is not
        ours (or gone), leave for the listing instead of offering a retry.
        """
        changes = {
            k: v for k, v in changes.items() if k not in ("payment_required", "is_paid")
        }
        try:
            profile = await self.api.update_profile(profile_id, changes)
        except (NotFound, AccessDenied) as e:
            self.state.notify(e.notice)
            self.state.redirect_to(LISTING_PATH)
            return None
        except PortalError as e:
            self.state.notify(e.notice)
            return None
        self.state.replace_profile(profile)
        self.state.notify(Notice("success", "Profile updated successfully"))
        return profile

    async def toggle_hidden(self, profile_id: str) -> Optional[dict]:
        try:
            profile = await self.api.toggle_hidden(profile_id)
        except PortalError as e:
            self.state.notify(e.notice)
            return None
        self.state.replace_profile(profile)
        message = "Profile hidden" if profile["is_hidden"] else "Profile visible again"
        self.state.notify(Notice("success", message))
        return profile

    async def delete(self, profile_id: str) -> bool:
        try:
            await self.api.delete_profile(profile_id)
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        self.state.drop_profile(profile_id)
        self.state.notify(Notice("success", "Profile deleted"))
        return True
