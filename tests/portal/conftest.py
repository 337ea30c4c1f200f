"""
Portal fixtures: an ApiClient wired to the in-process gateway and a scripted
checkout widget that signs receipts with the test gateway secret.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport

from portal.api import ApiClient
from portal.checkout import CheckoutResult
from portal.payments import PaymentCoordinator
from portal.state import AppState
from services.gateway_service.app.main import app as gateway_app
from services.payments_service.razorpay_client import RazorpayClient


class FakeWidget:
    """
    Scripted checkout widget.

    ``outcome`` is one of "complete", "cancel" or "fail"; ``tamper`` makes a
    completed checkout return a signature the server will reject.
    """

    def __init__(self):
        self.outcome = "complete"
        self.tamper = False
        self.load_error = None
        self.opened: list[dict] = []

    async def load(self) -> None:
        if self.load_error:
            raise self.load_error

    async def open(self, order: dict, *, name: str, email: str) -> CheckoutResult:
        self.opened.append(order)
        if self.outcome == "cancel":
            return CheckoutResult.cancelled()
        if self.outcome == "fail":
            return CheckoutResult.failed("Card declined by issuer")

        payment_id = f"pay_{uuid.uuid4().hex[:14]}"
        signature = RazorpayClient().expected_signature(order["order_id"], payment_id)
        if self.tamper:
            signature = signature[::-1]
        return CheckoutResult.completed(order["order_id"], payment_id, signature)


@pytest.fixture
def state() -> AppState:
    return AppState()


@pytest.fixture
def widget() -> FakeWidget:
    return FakeWidget()


@pytest_asyncio.fixture
async def api(service_apps, state) -> ApiClient:
    """Portal API client talking to the gateway with every service in-process."""
    return ApiClient(
        state,
        "http://test/api/v1",
        transport=ASGITransport(app=gateway_app),
    )


@pytest.fixture
def coordinator(api, state, widget) -> PaymentCoordinator:
    return PaymentCoordinator(api, state, widget)
