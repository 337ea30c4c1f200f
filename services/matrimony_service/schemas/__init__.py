"""Matrimony Service schemas package."""

from services.matrimony_service.schemas.profile import (  # noqa: F401
    Diet,
    Gender,
    MaritalStatus,
    MessageResponse,
    PaymentRecord,
    Photo,
    ProfileCreate,
    ProfileListResponse,
    ProfilePaymentStatus,
    ProfileResponse,
    ProfileUpdate,
)
