"""Payments Service models package."""

from services.payments_service.models.enums import (  # noqa: F401
    OrderStatus,
    PaymentPurpose,
)
from services.payments_service.models.order import PaymentOrder  # noqa: F401

__all__ = [
    "OrderStatus",
    "PaymentOrder",
    "PaymentPurpose",
]
