import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

UploadFolder = Literal["gallery", "events", "matrimony", "profiles"]


class SignedUploadParams(BaseModel):
    signature: str
    timestamp: int
    api_key: str
    cloud_name: str
    folder: str
    transformation: str


class GalleryPhotoCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    image_url: str = Field(..., min_length=1)
    public_id: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    event_id: Optional[uuid.UUID] = None
    tags: list[str] = Field(default_factory=list)


class GalleryPhotoResponse(BaseModel):
    id: uuid.UUID
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: str
    public_id: str
    event_id: Optional[uuid.UUID] = None
    tags: list[str] = Field(default_factory=list)
    uploaded_by: uuid.UUID
    is_visible: bool
    view_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GalleryPhotoListResponse(BaseModel):
    items: list[GalleryPhotoResponse]
    total: int
    page: int
    limit: int
    pages: int


class MessageResponse(BaseModel):
    message: str
