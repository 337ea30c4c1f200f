"""Events Service schemas package."""

from services.events_service.schemas.event import (  # noqa: F401
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    MessageResponse,
)

__all__ = [
    "EventCreate",
    "EventListResponse",
    "EventResponse",
    "EventUpdate",
    "MessageResponse",
]
