"""Payments Service schemas package."""

from services.payments_service.schemas.orders import (  # noqa: F401
    CreateOrderRequest,
    CreateOrderResponse,
    PaymentOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
