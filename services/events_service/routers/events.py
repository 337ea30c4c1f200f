"""Events: public listing and admin management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.events_service.models import Event, EventStatus
from services.events_service.schemas import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    MessageResponse,
)

router = APIRouter(prefix="/events", tags=["events"])
admin_router = APIRouter(prefix="/admin/events", tags=["admin"])
logger = get_logger(__name__)


async def _get_event_or_404(db: AsyncSession, event_id: uuid.UUID) -> Event:
    event = await db.get(Event, event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return event


@router.get("", response_model=EventListResponse)
async def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """Published events, latest start date first."""
    query = select(Event).where(Event.is_published.is_(True))
    if status_filter is not None:
        query = query.where(Event.status == status_filter)

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()
    result = await db.execute(
        query.order_by(Event.start_date.desc()).offset((page - 1) * limit).limit(limit)
    )
    return EventListResponse(
        items=[EventResponse.model_validate(e) for e in result.scalars().all()],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit,
    )


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    event = await _get_event_or_404(db, event_id)
    if not event.is_published:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return event


@admin_router.get("", response_model=EventListResponse)
async def list_all_events(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Every event, drafts included."""
    total = (await db.execute(select(func.count(Event.id)))).scalar_one()
    result = await db.execute(
        select(Event)
        .order_by(Event.start_date.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return EventListResponse(
        items=[EventResponse.model_validate(e) for e in result.scalars().all()],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit,
    )


@admin_router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    event = Event(**payload.model_dump(), created_by=uuid.UUID(admin.id))
    db.add(event)
    await db.commit()
    await db.refresh(event)

    logger.info(f"Event created: {event.title} by {admin.email}")
    return event


@admin_router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: uuid.UUID,
    payload: EventUpdate,
    _: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    event = await _get_event_or_404(db, event_id)
    changes = payload.model_dump(exclude_unset=True)
    start_date = changes.get("start_date", event.start_date)
    end_date = changes.get("end_date", event.end_date)
    if end_date and end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date cannot be before start_date",
        )

    for field, value in changes.items():
        setattr(event, field, value)
    await db.commit()
    await db.refresh(event)
    return event


@admin_router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: uuid.UUID,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    event = await _get_event_or_404(db, event_id)
    await db.delete(event)
    await db.commit()

    logger.info(f"Event {event_id} deleted by {admin.email}")
    return MessageResponse(message="Event deleted successfully")
