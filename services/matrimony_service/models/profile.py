"""Matrimony profile model."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.matrimony.lifecycle import ProfileState, derive_state, is_publicly_listed
from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class MatrimonyProfile(Base):
    """One matrimony listing, owned by exactly one account.

    Lifecycle state is derived from the flag columns; see
    ``libs.matrimony.lifecycle``.
    """

    __tablename__ = "matrimony_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, index=True, nullable=False
    )  # members_service.accounts.id

    # Payment (payment_required is fixed at creation)
    payment_required: Mapped[bool] = mapped_column(Boolean, default=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    payment_order_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    payment_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    payment_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Visibility / completion
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    scheduled_deletion: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    # Personal
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    gender: Mapped[str] = mapped_column(String, nullable=False, index=True)
    height: Mapped[str] = mapped_column(String, nullable=False)
    weight: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    marital_status: Mapped[str] = mapped_column(String, nullable=False)
    diet: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Contact
    phone: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    current_address: Mapped[str] = mapped_column(String, nullable=False)
    city: Mapped[str] = mapped_column(String, nullable=False)
    state: Mapped[str] = mapped_column(String, nullable=False)

    # Family
    father_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    mother_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    siblings: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    family_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Education & career
    education: Mapped[str] = mapped_column(String, nullable=False)
    occupation: Mapped[str] = mapped_column(String, nullable=False)
    employer_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    annual_income: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Preferences & bio
    partner_preferences: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hobbies: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    about_me: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Ordered list of {url, public_id, is_primary, uploaded_at}
    photos: Mapped[list[dict]] = mapped_column(JSON, default=list)

    view_count: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @property
    def lifecycle_state(self) -> ProfileState:
        return derive_state(self)

    @property
    def is_listed(self) -> bool:
        return is_publicly_listed(self)

    def __repr__(self):
        return f"<MatrimonyProfile {self.id} owner={self.owner_id}>"
