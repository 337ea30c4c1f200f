"""Gallery: public listing plus admin metadata and deletion."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger
from libs.common.media_utils import destroy_images
from libs.db.session import get_async_db
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.media_service.models import GalleryPhoto
from services.media_service.schemas import (
    GalleryPhotoCreate,
    GalleryPhotoListResponse,
    GalleryPhotoResponse,
    MessageResponse,
)

router = APIRouter(prefix="/gallery", tags=["gallery"])
admin_router = APIRouter(prefix="/admin/gallery", tags=["admin"])
logger = get_logger(__name__)


async def _get_photo_or_404(db: AsyncSession, photo_id: uuid.UUID) -> GalleryPhoto:
    photo = await db.get(GalleryPhoto, photo_id)
    if not photo:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Photo not found",
        )
    return photo


@router.get("", response_model=GalleryPhotoListResponse)
async def list_photos(
    event_id: Optional[uuid.UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """Visible photos, newest first."""
    query = select(GalleryPhoto).where(GalleryPhoto.is_visible.is_(True))
    if event_id is not None:
        query = query.where(GalleryPhoto.event_id == event_id)

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()
    result = await db.execute(
        query.order_by(GalleryPhoto.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return GalleryPhotoListResponse(
        items=[GalleryPhotoResponse.model_validate(p) for p in result.scalars().all()],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit,
    )


@router.get("/{photo_id}", response_model=GalleryPhotoResponse)
async def get_photo(photo_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    photo = await _get_photo_or_404(db, photo_id)
    if not photo.is_visible:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Photo not found",
        )
    photo.view_count = (photo.view_count or 0) + 1
    await db.commit()
    await db.refresh(photo)
    return photo


@admin_router.post(
    "", response_model=GalleryPhotoResponse, status_code=status.HTTP_201_CREATED
)
async def save_photo(
    payload: GalleryPhotoCreate,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Record an image the admin already uploaded with signed parameters."""
    existing = await db.execute(
        select(GalleryPhoto).where(GalleryPhoto.public_id == payload.public_id)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Image already saved to the gallery",
        )

    photo = GalleryPhoto(**payload.model_dump(), uploaded_by=uuid.UUID(admin.id))
    db.add(photo)
    await db.commit()
    await db.refresh(photo)

    logger.info(f"Gallery photo {photo.public_id} saved by {admin.email}")
    return photo


@admin_router.delete("/{photo_id}", response_model=MessageResponse)
async def delete_photo(
    photo_id: uuid.UUID,
    admin: AccountSnapshot = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    photo = await _get_photo_or_404(db, photo_id)
    public_id = photo.public_id
    await db.delete(photo)
    await db.commit()

    await destroy_images([public_id])
    logger.info(f"Gallery photo {public_id} deleted by {admin.email}")
    return MessageResponse(message="Photo deleted successfully")
