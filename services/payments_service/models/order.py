import uuid
from datetime import datetime

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.payments_service.models.enums import (
    OrderStatus,
    PaymentPurpose,
    enum_values,
)
from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class PaymentOrder(Base):
    """One gateway order for a membership or a profile activation.

    Stays ``pending`` until a receipt with a valid signature is verified;
    failed verifications only bump ``verification_attempts``.
    """

    __tablename__ = "payment_orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    gateway_order_id: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )

    account_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    purpose: Mapped[PaymentPurpose] = mapped_column(
        SAEnum(
            PaymentPurpose,
            name="payment_purpose_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    # Account id for memberships, profile id for profile activations
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)

    amount: Mapped[int] = mapped_column(Integer, nullable=False)  # paise
    currency: Mapped[str] = mapped_column(String(8), default="INR", nullable=False)

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            name="payment_order_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    verification_attempts: Mapped[int] = mapped_column(Integer, default=0)

    gateway_payment_id: Mapped[str | None] = mapped_column(String, nullable=True)
    gateway_signature: Mapped[str | None] = mapped_column(String, nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<PaymentOrder {self.gateway_order_id} {self.purpose.value} {self.status.value}>"
