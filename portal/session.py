"""Sign-in, sign-out and session refresh actions."""

from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger

from portal.api import ApiClient
from portal.errors import Notice, PortalError
from portal.state import AppState

logger = get_logger(__name__)


class SessionActions:
    def __init__(self, api: ApiClient, state: AppState):
        self.api = api
        self.state = state

    def _start(self, token_response: dict) -> None:
        self.state.sign_in(
            token_response["access_token"],
            AccountSnapshot(**token_response["account"]),
        )

    async def register(self, name: str, email: str, password: str, phone: str) -> bool:
        try:
            result = await self.api.register(name, email, password, phone)
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        self.state.notify(Notice("success", result["message"]))
        return True

    async def verify_otp(self, email: str, otp: str) -> bool:
        try:
            self._start(await self.api.verify_otp(email, otp))
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        await self.refresh()
        return True

    async def login(self, email: str, password: str) -> bool:
        try:
            self._start(await self.api.login(email, password))
        except PortalError as e:
            self.state.notify(e.notice)
            return False
        await self.refresh()
        return True

    def logout(self) -> None:
        # Tokens are stateless; dropping it locally ends the session.
        self.state.sign_out()
        self.state.notify(Notice("info", "Logged out successfully"))

    async def refresh(self) -> bool:
        """Re-read the account and the caller's own profiles."""
        if not self.state.is_authenticated:
            return False
        ticket = self.state.begin("account")
        try:
            account = AccountSnapshot(**await self.api.me())
            # Own profiles decide listing access for non-members; suspended
            # and unapproved accounts cannot read them.
            profiles = []
            if account.is_approved and not account.is_suspended:
                profiles = await self.api.my_profiles()
        except PortalError as e:
            if self.state.is_authenticated:
                self.state.notify(e.notice)
            return False
        if not self.state.is_current(ticket):
            return False
        self.state.set_account(account)
        self.state.set_my_profiles(profiles)
        return True
