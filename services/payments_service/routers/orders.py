"""Checkout orders: create a gateway order, then verify the signed receipt.

Flow:
1. Portal calls POST /payments/orders -> Razorpay order is created and stored
2. Portal opens the checkout widget with the returned order id
3. Portal calls POST /payments/verify with the widget's receipt
   -> signature is checked, the owning service is told to activate
"""

import uuid

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import require_approved
from libs.auth.models import AccountSnapshot
from libs.common import service_client
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.email import send_membership_confirmation
from libs.common.error_handler import ServiceError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.payments_service.models import OrderStatus, PaymentOrder, PaymentPurpose
from services.payments_service.razorpay_client import (
    RazorpayClient,
    RazorpayError,
    get_razorpay_client,
)
from services.payments_service.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    PaymentOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

router = APIRouter(prefix="/payments", tags=["payments"])
logger = get_logger(__name__)
settings = get_settings()

CALLING_SERVICE = "payments"


def _gateway() -> RazorpayClient:
    if not settings.razorpay_enabled:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment service not configured",
        )
    return get_razorpay_client()


def _upstream_error(e: Exception) -> HTTPException:
    logger.error(f"Upstream call failed during payment handling: {e}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="A dependent service is unavailable. Please try again.",
    )


async def _resolve_target(
    payload: CreateOrderRequest, account: AccountSnapshot
) -> tuple[uuid.UUID, int]:
    """Target id and amount for an order; rejects targets already paid for."""
    if payload.purpose is PaymentPurpose.MEMBERSHIP:
        if account.is_member:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Already a member",
            )
        return uuid.UUID(account.id), settings.MEMBERSHIP_FEE

    try:
        profile = await service_client.get_profile(
            str(payload.target_id), calling_service=CALLING_SERVICE
        )
    except httpx.HTTPError as e:
        raise _upstream_error(e)

    if profile is None or profile["owner_id"] != account.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    if profile["is_paid"] or not profile["payment_required"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Profile already paid",
        )
    return payload.target_id, settings.MATRIMONY_FEE


@router.post("/orders", response_model=CreateOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: CreateOrderRequest,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a gateway order for a membership or a profile activation."""
    gateway = _gateway()
    target_id, amount = await _resolve_target(payload, account)

    receipt = f"{payload.purpose.value[:4]}_{account.id[:8]}_{int(utc_now().timestamp())}"
    try:
        gateway_order = await gateway.create_order(
            amount=amount,
            currency=settings.PAYMENT_CURRENCY,
            receipt=receipt,
            notes={
                "account_id": account.id,
                "purpose": payload.purpose.value,
                "target_id": str(target_id),
            },
        )
    except RazorpayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to create payment order. Please try again.",
        )

    order = PaymentOrder(
        gateway_order_id=gateway_order.order_id,
        account_id=uuid.UUID(account.id),
        purpose=payload.purpose,
        target_id=target_id,
        amount=gateway_order.amount,
        currency=gateway_order.currency,
    )
    db.add(order)
    await db.commit()

    logger.info(
        f"Created {payload.purpose.value} order {order.gateway_order_id} "
        f"for account {account.id}"
    )
    return CreateOrderResponse(
        order_id=order.gateway_order_id,
        amount=order.amount,
        currency=order.currency,
        key_id=gateway.key_id,
        purpose=order.purpose,
        target_id=order.target_id,
    )


async def _fulfil(order: PaymentOrder) -> dict:
    """Tell the owning service about the payment. Safe to repeat."""
    record = {
        "order_id": order.gateway_order_id,
        "payment_id": order.gateway_payment_id,
        "amount": order.amount,
    }
    if order.purpose is PaymentPurpose.MEMBERSHIP:
        return await service_client.activate_membership(
            str(order.target_id), record, calling_service=CALLING_SERVICE
        )
    return await service_client.mark_profile_paid(
        str(order.target_id), record, calling_service=CALLING_SERVICE
    )


def _verified_response(order: PaymentOrder, message: str) -> VerifyPaymentResponse:
    return VerifyPaymentResponse(
        status=order.status,
        message=message,
        purpose=order.purpose,
        target_id=order.target_id,
        order_id=order.gateway_order_id,
        payment_id=order.gateway_payment_id,
        paid_at=order.paid_at,
    )


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    payload: VerifyPaymentRequest,
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Verify a checkout receipt and activate the purchase.

    A bad signature leaves the order pending so the user can retry. An order
    that is already paid returns its stored result without re-activating.
    """
    gateway = _gateway()
    result = await db.execute(
        select(PaymentOrder).where(
            PaymentOrder.gateway_order_id == payload.order_id,
            PaymentOrder.account_id == uuid.UUID(account.id),
        )
    )
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found",
        )

    if order.status is OrderStatus.PAID:
        return _verified_response(order, "Payment already verified")

    if not gateway.verify_signature(
        payload.order_id, payload.payment_id, payload.signature
    ):
        order.verification_attempts = (order.verification_attempts or 0) + 1
        await db.commit()
        logger.warning(
            f"Invalid payment signature for order {order.gateway_order_id} "
            f"(attempt {order.verification_attempts})"
        )
        raise ServiceError(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payment signature",
            code="PAYMENT_VERIFICATION_FAILED",
        )

    order.gateway_payment_id = payload.payment_id
    order.gateway_signature = payload.signature
    try:
        fulfilled = await _fulfil(order)
    except httpx.HTTPError as e:
        # Order stays pending; the owning service calls are idempotent.
        await db.rollback()
        raise _upstream_error(e)

    order.status = OrderStatus.PAID
    order.paid_at = utc_now()
    await db.commit()
    await db.refresh(order)

    logger.info(
        f"Payment {order.gateway_payment_id} verified for {order.purpose.value} "
        f"target {order.target_id}"
    )
    if order.purpose is PaymentPurpose.MEMBERSHIP:
        await send_membership_confirmation(
            fulfilled.get("email", account.email),
            fulfilled.get("name", account.name),
            order.amount,
        )
    return _verified_response(order, "Payment verified successfully")


@router.get("/orders/mine", response_model=list[PaymentOrderResponse])
async def list_my_orders(
    account: AccountSnapshot = Depends(require_approved),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(PaymentOrder)
        .where(PaymentOrder.account_id == uuid.UUID(account.id))
        .order_by(PaymentOrder.created_at.desc())
    )
    return result.scalars().all()
