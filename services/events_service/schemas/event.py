import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from services.events_service.models.event import EventStatus


class EventBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    end_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    venue_name: str = Field(..., min_length=1)
    venue_address: str = Field(..., min_length=1)
    venue_city: Optional[str] = None
    google_maps_link: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    organizer: Optional[str] = None
    status: EventStatus = EventStatus.UPCOMING
    is_published: bool = False


class EventCreate(EventBase):
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class EventUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    end_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None
    venue_city: Optional[str] = None
    google_maps_link: Optional[str] = None
    images: Optional[list[str]] = None
    organizer: Optional[str] = None
    status: Optional[EventStatus] = None
    is_published: Optional[bool] = None


class EventResponse(EventBase):
    id: uuid.UUID
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventListResponse(BaseModel):
    items: list[EventResponse]
    total: int
    page: int
    limit: int
    pages: int


class MessageResponse(BaseModel):
    message: str
