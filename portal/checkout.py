"""The payment gateway's checkout widget, seen from the portal.

The widget is the one place the payment flow suspends on the user. It has
exactly three exits, reported as a ``CheckoutResult``.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Protocol


class CheckoutOutcome(str, enum.Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckoutResult:
    outcome: CheckoutOutcome
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    signature: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def completed(cls, order_id: str, payment_id: str, signature: str) -> "CheckoutResult":
        return cls(
            CheckoutOutcome.COMPLETED,
            order_id=order_id,
            payment_id=payment_id,
            signature=signature,
        )

    @classmethod
    def cancelled(cls) -> "CheckoutResult":
        return cls(CheckoutOutcome.CANCELLED)

    @classmethod
    def failed(cls, error: Optional[str] = None) -> "CheckoutResult":
        return cls(CheckoutOutcome.FAILED, error=error)


class CheckoutWidget(Protocol):
    async def load(self) -> None:
        """Make the widget available; raises if its script cannot be loaded."""

    async def open(self, order: dict, *, name: str, email: str) -> CheckoutResult:
        """Show checkout for ``order`` and wait until the user leaves it."""
