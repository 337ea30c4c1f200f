import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from services.payments_service.models.enums import OrderStatus, PaymentPurpose


class CreateOrderRequest(BaseModel):
    purpose: PaymentPurpose
    # Required for profile activation; memberships always target the caller
    target_id: Optional[uuid.UUID] = None

    @model_validator(mode="after")
    def check_target(self):
        if self.purpose is PaymentPurpose.MATRIMONY_PROFILE and self.target_id is None:
            raise ValueError("target_id is required for matrimony_profile orders")
        return self


class CreateOrderResponse(BaseModel):
    order_id: str
    amount: int
    currency: str
    key_id: str
    purpose: PaymentPurpose
    target_id: uuid.UUID


class VerifyPaymentRequest(BaseModel):
    order_id: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class VerifyPaymentResponse(BaseModel):
    status: OrderStatus
    message: str
    purpose: PaymentPurpose
    target_id: uuid.UUID
    order_id: str
    payment_id: Optional[str] = None
    paid_at: Optional[datetime] = None


class PaymentOrderResponse(BaseModel):
    id: uuid.UUID
    gateway_order_id: str
    purpose: PaymentPurpose
    target_id: uuid.UUID
    amount: int
    currency: str
    status: OrderStatus
    verification_attempts: int
    gateway_payment_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
