"""
Shared fakes for the external hosts the services talk to.

Nothing in the suite reaches Razorpay or Cloudinary: order creation and image
deletion are replaced per test, and receipts are signed with the test secret.
"""

import uuid

import pytest

from services.payments_service.razorpay_client import (
    GatewayOrder,
    RazorpayClient,
    RazorpayError,
)


class FakeGateway:
    """Records created orders and signs receipts like the checkout widget."""

    def __init__(self):
        self.orders: list[GatewayOrder] = []
        self.fail_next = False

    async def create_order(self, amount, currency, receipt, notes=None):
        if self.fail_next:
            self.fail_next = False
            raise RazorpayError("Gateway unavailable")
        order = GatewayOrder(
            order_id=f"order_{uuid.uuid4().hex[:14]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            status="created",
        )
        self.orders.append(order)
        return order

    @staticmethod
    def sign(order_id: str, payment_id: str) -> str:
        return RazorpayClient().expected_signature(order_id, payment_id)

    def receipt(self, order_id: str) -> dict:
        payment_id = f"pay_{uuid.uuid4().hex[:14]}"
        return {
            "order_id": order_id,
            "payment_id": payment_id,
            "signature": self.sign(order_id, payment_id),
        }


@pytest.fixture(autouse=True)
def fake_gateway(monkeypatch) -> FakeGateway:
    gateway = FakeGateway()

    async def _create_order(self, amount, currency, receipt, notes=None):
        return await gateway.create_order(amount, currency, receipt, notes)

    monkeypatch.setattr(RazorpayClient, "create_order", _create_order)
    return gateway


@pytest.fixture(autouse=True)
def destroyed_images(monkeypatch) -> list[str]:
    """Public ids the services asked the media host to delete."""
    import cloudinary.uploader

    destroyed: list[str] = []

    def _destroy(public_id, **options):
        destroyed.append(public_id)
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "destroy", _destroy)
    return destroyed
