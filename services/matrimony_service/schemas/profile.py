"""Pydantic schemas for matrimony profiles."""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import age_on
from libs.matrimony.lifecycle import (
    ProfileState,
    normalize_photos,
    require_submittable_photos,
)
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PHONE_PATTERN = r"^\d{10}$"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class MaritalStatus(str, Enum):
    NEVER_MARRIED = "never_married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"


class Diet(str, Enum):
    VEGETARIAN = "vegetarian"
    NON_VEGETARIAN = "non-vegetarian"
    EGGETARIAN = "eggetarian"


class Photo(BaseModel):
    url: str = Field(..., min_length=1)
    public_id: str = Field(..., min_length=1)
    is_primary: bool = False
    uploaded_at: Optional[datetime] = None


def _check_age(value: date) -> date:
    min_age = get_settings().MATRIMONY_MIN_AGE
    if age_on(value) < min_age:
        raise ValueError(f"Must be at least {min_age} years old")
    return value


def _photo_dicts(photos: List[Photo]) -> List[dict]:
    return [photo.model_dump(mode="json") for photo in photos]


# ============================================================================
# REQUESTS
# ============================================================================


class ProfileCreate(BaseModel):
    """Submitted wizard. Payment flags are decided server-side."""

    model_config = ConfigDict(extra="forbid")

    # Personal
    full_name: str = Field(..., min_length=2, max_length=100)
    date_of_birth: date
    gender: Gender
    height: str = Field(..., min_length=1, max_length=20)
    weight: Optional[str] = Field(None, max_length=20)
    marital_status: MaritalStatus
    diet: Optional[Diet] = None

    # Contact
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: EmailStr
    current_address: str = Field(..., min_length=1, max_length=300)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)

    # Family
    father_name: Optional[str] = Field(None, max_length=100)
    mother_name: Optional[str] = Field(None, max_length=100)
    siblings: Optional[str] = Field(None, max_length=200)
    family_details: Optional[str] = Field(None, max_length=1000)

    # Education & career
    education: str = Field(..., min_length=1, max_length=200)
    occupation: str = Field(..., min_length=1, max_length=200)
    employer_name: Optional[str] = Field(None, max_length=200)
    annual_income: Optional[str] = Field(None, max_length=50)

    # Preferences & bio
    partner_preferences: Optional[str] = Field(None, max_length=1000)
    hobbies: Optional[str] = Field(None, max_length=500)
    about_me: Optional[str] = Field(None, max_length=2000)

    photos: List[Photo]

    @field_validator("date_of_birth")
    @classmethod
    def validate_dob(cls, value: date) -> date:
        return _check_age(value)

    @field_validator("photos")
    @classmethod
    def validate_photos(cls, photos: List[Photo]) -> List[Photo]:
        normalized = require_submittable_photos(
            _photo_dicts(photos), get_settings().MATRIMONY_MAX_PHOTOS
        )
        return [Photo(**p) for p in normalized]


class ProfileUpdate(BaseModel):
    """Owner edits. Payment and lifecycle flags are not editable."""

    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    height: Optional[str] = Field(None, min_length=1, max_length=20)
    weight: Optional[str] = Field(None, max_length=20)
    marital_status: Optional[MaritalStatus] = None
    diet: Optional[Diet] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    current_address: Optional[str] = Field(None, min_length=1, max_length=300)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    father_name: Optional[str] = Field(None, max_length=100)
    mother_name: Optional[str] = Field(None, max_length=100)
    siblings: Optional[str] = Field(None, max_length=200)
    family_details: Optional[str] = Field(None, max_length=1000)
    education: Optional[str] = Field(None, min_length=1, max_length=200)
    occupation: Optional[str] = Field(None, min_length=1, max_length=200)
    employer_name: Optional[str] = Field(None, max_length=200)
    annual_income: Optional[str] = Field(None, max_length=50)
    partner_preferences: Optional[str] = Field(None, max_length=1000)
    hobbies: Optional[str] = Field(None, max_length=500)
    about_me: Optional[str] = Field(None, max_length=2000)
    photos: Optional[List[Photo]] = None

    @field_validator("date_of_birth")
    @classmethod
    def validate_dob(cls, value: Optional[date]) -> Optional[date]:
        return _check_age(value) if value is not None else value

    @field_validator("photos")
    @classmethod
    def validate_photos(cls, photos: Optional[List[Photo]]) -> Optional[List[Photo]]:
        if photos is None:
            return photos
        normalized = normalize_photos(
            _photo_dicts(photos), get_settings().MATRIMONY_MAX_PHOTOS
        )
        return [Photo(**p) for p in normalized]


class PaymentRecord(BaseModel):
    order_id: str
    payment_id: str
    amount: int


# ============================================================================
# RESPONSES
# ============================================================================


class ProfileResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    lifecycle_state: ProfileState
    is_listed: bool

    payment_required: bool
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_hidden: bool
    is_completed: bool
    completed_date: Optional[datetime] = None
    scheduled_deletion: Optional[datetime] = None

    full_name: str
    date_of_birth: date
    age: int
    gender: str
    height: str
    weight: Optional[str] = None
    marital_status: str
    diet: Optional[str] = None
    phone: str
    email: str
    current_address: str
    city: str
    state: str
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    siblings: Optional[str] = None
    family_details: Optional[str] = None
    education: str
    occupation: str
    employer_name: Optional[str] = None
    annual_income: Optional[str] = None
    partner_preferences: Optional[str] = None
    hobbies: Optional[str] = None
    about_me: Optional[str] = None
    photos: List[Photo] = []
    view_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileListResponse(BaseModel):
    items: List[ProfileResponse]
    total: int
    page: int
    limit: int
    pages: int


class ProfilePaymentStatus(BaseModel):
    """Slim view for the payments service."""

    id: uuid.UUID
    owner_id: uuid.UUID
    payment_required: bool
    is_paid: bool
    lifecycle_state: ProfileState

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str
