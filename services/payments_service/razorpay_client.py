"""
Razorpay client for checkout orders and payment signature checks.

Provides:
- Creating orders (amount in paise) for the browser checkout widget
- Verifying the checkout receipt signature
"""

import asyncio
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Optional

import razorpay
from libs.common.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass
class GatewayOrder:
    """Order as created on Razorpay."""

    order_id: str
    amount: int  # in paise
    currency: str
    receipt: str
    status: str


class RazorpayError(Exception):
    """Base exception for Razorpay API errors."""

    def __init__(self, message: str, response_data: dict = None):
        self.message = message
        self.response_data = response_data or {}
        super().__init__(message)


class RazorpayClient:
    """Async wrapper around the Razorpay SDK."""

    def __init__(self, key_id: str = None, key_secret: str = None):
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        if not self.key_id or not self.key_secret:
            raise ValueError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required")
        self._client = razorpay.Client(auth=(self.key_id, self.key_secret))

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[dict] = None,
    ) -> GatewayOrder:
        """
        Create an order the checkout widget can be opened against.

        Args:
            amount: Amount in paise
            currency: ISO currency code (INR)
            receipt: Merchant reference, max 40 characters
            notes: Free-form key/values stored on the order

        Returns:
            GatewayOrder with the Razorpay order id
        """
        data = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt[:40],
            "notes": notes or {},
        }
        try:
            order = await asyncio.to_thread(self._client.order.create, data=data)
        except Exception as e:  # SDK raises its own errors and requests errors
            logger.error(f"Razorpay order creation failed: {e}")
            raise RazorpayError(str(e)) from e

        return GatewayOrder(
            order_id=order["id"],
            amount=order["amount"],
            currency=order["currency"],
            receipt=order.get("receipt", receipt),
            status=order.get("status", "created"),
        )

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}"
        return hmac.new(
            self.key_secret.encode(), message.encode(), hashlib.sha256
        ).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check the checkout handler's signature over ``order_id|payment_id``."""
        expected = self.expected_signature(order_id, payment_id)
        return hmac.compare_digest(expected, signature or "")


def get_razorpay_client() -> RazorpayClient:
    return RazorpayClient()
