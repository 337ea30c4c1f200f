"""Admin console actions for accounts and matrimony profiles.

Each action reports through one notice and never raises to the caller.
Bulk actions report a single aggregate notice.
"""

from typing import Awaitable, Optional

from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger

from portal.api import ApiClient
from portal.errors import Notice, PortalError
from portal.state import AppState

logger = get_logger(__name__)


class AdminConsole:
    def __init__(self, api: ApiClient, state: AppState):
        self.api = api
        self.state = state
        self.accounts: list[dict] = []
        self.profiles: list[dict] = []

    async def _run(self, call: Awaitable, success: str) -> Optional[dict]:
        try:
            result = await call
        except PortalError as e:
            self.state.notify(e.notice)
            return None
        self.state.notify(Notice("success", success))
        return result if result is not None else {}

    def _replace_account(self, account: dict) -> None:
        self.accounts = [account if a["id"] == account["id"] else a for a in self.accounts]
        current = self.state.account
        if current is not None and current.id == account["id"]:
            self.state.set_account(AccountSnapshot(**account))

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def load_accounts(self, **filters) -> bool:
        ticket = self.state.begin("admin-accounts")
        try:
            page = await self.api.list_accounts(**filters)
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        if self.state.is_current(ticket):
            self.accounts = page["items"]
        return True

    async def approve(self, account_id: str) -> bool:
        account = await self._run(self.api.approve_account(account_id), "User approved")
        if account:
            self._replace_account(account)
        return account is not None

    async def reject(self, account_id: str) -> bool:
        done = await self._run(self.api.reject_account(account_id), "User rejected")
        if done is not None:
            self.accounts = [a for a in self.accounts if a["id"] != account_id]
        return done is not None

    async def suspend(self, account_id: str, reason: str) -> bool:
        account = await self._run(
            self.api.suspend_account(account_id, reason), "User suspended"
        )
        if account:
            self._replace_account(account)
        return account is not None

    async def unsuspend(self, account_id: str) -> bool:
        account = await self._run(self.api.unsuspend_account(account_id), "User unsuspended")
        if account:
            self._replace_account(account)
        return account is not None

    async def grant_admin(self, account_id: str) -> bool:
        account = await self._run(self.api.grant_admin(account_id), "Admin access granted")
        if account:
            self._replace_account(account)
        return account is not None

    async def mark_member(self, account_id: str, note: Optional[str] = None) -> bool:
        account = await self._run(
            self.api.mark_member(account_id, note), "User marked as member"
        )
        if account:
            self._replace_account(account)
        return account is not None

    async def bulk_approve(self, account_ids: list[str]) -> bool:
        return await self._bulk(self.api.bulk_approve, account_ids, "approved")

    async def bulk_reject(self, account_ids: list[str]) -> bool:
        return await self._bulk(self.api.bulk_reject, account_ids, "rejected")

    async def _bulk(self, call, account_ids: list[str], verb: str) -> bool:
        if not account_ids:
            self.state.notify(Notice("warning", "Select at least one user"))
            return False
        try:
            result = await call(account_ids)
        except PortalError as e:
            self.state.notify(Notice("error", f"Bulk action failed: {e.message}"))
            return False

        processed, requested = result["processed"], result["requested"]
        level = "success" if processed == requested else "warning"
        self.state.notify(Notice(level, f"{processed} of {requested} users {verb}"))
        await self.load_accounts()
        return True

    # ------------------------------------------------------------------
    # Matrimony
    # ------------------------------------------------------------------

    async def load_profiles(self, **filters) -> bool:
        ticket = self.state.begin("admin-profiles")
        try:
            page = await self.api.admin_list_profiles(**filters)
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        if self.state.is_current(ticket):
            self.profiles = page["items"]
        return True

    async def mark_completed(self, profile_id: str) -> bool:
        profile = await self._run(
            self.api.mark_completed(profile_id),
            "Profile marked as completed and scheduled for deletion",
        )
        if profile:
            self.profiles = [profile if p["id"] == profile_id else p for p in self.profiles]
        return profile is not None

    async def delete_profile(self, profile_id: str) -> bool:
        done = await self._run(
            self.api.admin_delete_profile(profile_id), "Profile deleted"
        )
        if done is not None:
            self.profiles = [p for p in self.profiles if p["id"] != profile_id]
            self.state.drop_profile(profile_id)
        return done is not None
