"""Events Service models package."""

from services.events_service.models.event import Event, EventStatus  # noqa: F401

__all__ = [
    "Event",
    "EventStatus",
]
