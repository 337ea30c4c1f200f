"""Client-side error taxonomy and the notices shown for each kind.

Every failure an action can hit is one of the classes below. Actions catch
``PortalError`` where they start and publish ``error.notice`` instead of
letting the exception reach the view.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Notice:
    level: str  # info | success | warning | error
    message: str


class PortalError(Exception):
    level = "error"
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def notice(self) -> Notice:
        return Notice(self.level, self.message)


class ValidationFailed(PortalError):
    """Rejected input: field checks before submit, or a 400/409/422 from the API."""

    level = "warning"
    default_message = "Please correct the highlighted fields."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        fields: Optional[dict[str, str]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.fields = fields or {}


class SessionInvalid(PortalError):
    level = "warning"
    default_message = "Your session has expired. Please log in again."


class AccessDenied(PortalError):
    level = "warning"
    default_message = "You do not have access to this page."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = 403,
    ):
        super().__init__(message, status_code=status_code)
        self.code = code


class NotFound(PortalError):
    level = "warning"
    default_message = "We couldn't find what you were looking for."


class ServerError(PortalError):
    default_message = "The server had a problem. Please try again shortly."


class NetworkError(PortalError):
    default_message = "Network error. Check your connection and try again."


class PaymentError(PortalError):
    default_message = "Payment could not be completed. Please try again."


class CheckoutLoadError(PaymentError):
    default_message = "Could not load the payment window. Check your connection and try again."


class OrderCreationError(PaymentError):
    default_message = "Failed to create payment order. Please try again."


class GatewayPaymentError(PaymentError):
    default_message = "Payment failed. Please try again."


class VerificationError(PaymentError):
    default_message = (
        "Payment verification failed. You have not been charged twice; "
        "please retry or contact support."
    )
