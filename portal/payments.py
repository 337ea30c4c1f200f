"""Payment completion for memberships and matrimony profile activation.

The coordinator is a small state machine::

    idle -> loading -> creating_order -> awaiting_gateway -> verifying -> idle

Every exit, success or failure, lands back on idle so the user can retry
from the same button. Local account and profile state changes only by
re-fetching from the API after a verified payment.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger

from portal.api import ApiClient
from portal.checkout import CheckoutOutcome, CheckoutWidget
from portal.errors import (
    CheckoutLoadError,
    GatewayPaymentError,
    Notice,
    OrderCreationError,
    PortalError,
    SessionInvalid,
    VerificationError,
)
from portal.state import AppState

logger = get_logger(__name__)

MEMBERSHIP = "membership"
MATRIMONY_PROFILE = "matrimony_profile"


class PaymentPhase(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    CREATING_ORDER = "creating_order"
    AWAITING_GATEWAY = "awaiting_gateway"
    VERIFYING = "verifying"


class PaymentOutcome(str, enum.Enum):
    PAID = "paid"
    CANCELLED = "cancelled"
    FAILED = "failed"
    BUSY = "busy"


@dataclass(frozen=True)
class PurchaseTarget:
    purpose: str
    target_id: Optional[str] = None

    @classmethod
    def membership(cls) -> "PurchaseTarget":
        return cls(MEMBERSHIP)

    @classmethod
    def profile(cls, profile_id: str) -> "PurchaseTarget":
        return cls(MATRIMONY_PROFILE, profile_id)


class PaymentCoordinator:
    def __init__(self, api: ApiClient, state: AppState, widget: CheckoutWidget):
        self.api = api
        self.state = state
        self.widget = widget
        self.phase = PaymentPhase.IDLE

    @property
    def can_pay(self) -> bool:
        """Whether the pay button is enabled."""
        return self.phase is PaymentPhase.IDLE

    async def pay(self, target: PurchaseTarget) -> PaymentOutcome:
        """Run one purchase attempt for ``target``.

        Rejected without side effects while another attempt is in flight.
        """
        if not self.can_pay:
            logger.info(f"Ignoring pay request while {self.phase.value}")
            return PaymentOutcome.BUSY

        self.phase = PaymentPhase.LOADING
        try:
            return await self._run(target)
        except SessionInvalid as e:
            # The API client already cleared the session and asked for login.
            self.state.notify(e.notice)
            return PaymentOutcome.FAILED
        except PortalError as e:
            logger.warning(f"{target.purpose} payment failed: {type(e).__name__}")
            self.state.notify(e.notice)
            return PaymentOutcome.FAILED
        finally:
            self.phase = PaymentPhase.IDLE

    async def _run(self, target: PurchaseTarget) -> PaymentOutcome:
        try:
            await self.widget.load()
        except Exception as e:
            raise CheckoutLoadError() from e

        self.phase = PaymentPhase.CREATING_ORDER
        try:
            order = await self.api.create_order(target.purpose, target.target_id)
        except SessionInvalid:
            raise
        except PortalError as e:
            # 4xx details ("Already a member") are worth showing as-is.
            client_error = e.status_code is not None and e.status_code < 500
            raise OrderCreationError(e.message if client_error else None) from e

        self.phase = PaymentPhase.AWAITING_GATEWAY
        account = self.state.account
        try:
            result = await self.widget.open(
                order,
                name=account.name if account else "",
                email=account.email if account else "",
            )
        except Exception as e:
            logger.exception("Checkout widget crashed")
            raise GatewayPaymentError() from e

        if result.outcome is CheckoutOutcome.CANCELLED:
            self.state.notify(Notice("warning", "Payment cancelled"))
            return PaymentOutcome.CANCELLED
        if result.outcome is CheckoutOutcome.FAILED:
            raise GatewayPaymentError(result.error)

        self.phase = PaymentPhase.VERIFYING
        try:
            await self.api.verify_payment(
                result.order_id or order["order_id"],
                result.payment_id,
                result.signature,
            )
        except SessionInvalid:
            raise
        except PortalError as e:
            raise VerificationError(e.message if e.status_code == 400 else None) from e

        await self._refresh(target)
        self.state.notify(Notice("success", _success_message(target)))
        return PaymentOutcome.PAID

    async def _refresh(self, target: PurchaseTarget) -> None:
        """Re-fetch whatever the payment changed before gated views re-render."""
        try:
            if target.purpose == MEMBERSHIP:
                self.state.set_account(AccountSnapshot(**await self.api.me()))
            else:
                self.state.replace_profile(await self.api.get_profile(target.target_id))
        except PortalError as e:
            logger.warning(f"Refresh after payment failed: {type(e).__name__}")
            self.state.notify(
                Notice("info", "Payment received. Reload the page to see the update.")
            )


def _success_message(target: PurchaseTarget) -> str:
    if target.purpose == MEMBERSHIP:
        return "Payment successful! You are now a lifetime member."
    return "Payment successful! Your matrimony profile is now active."
