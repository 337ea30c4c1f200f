"""Events Service models."""

import enum
import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import JSON, Boolean, Date, DateTime, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column


class EventStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(Base):
    """Community gathering, festival or social-work drive."""

    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    start_time: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # "18:30"
    end_time: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    venue_name: Mapped[str] = mapped_column(String, nullable=False)
    venue_address: Mapped[str] = mapped_column(String, nullable=False)
    venue_city: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    google_maps_link: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    images: Mapped[list[str]] = mapped_column(JSON, default=list)
    organizer: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    status: Mapped[EventStatus] = mapped_column(
        SAEnum(
            EventStatus,
            name="event_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=EventStatus.UPCOMING,
        index=True,
    )
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Event {self.title}>"
