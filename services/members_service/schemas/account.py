"""Pydantic schemas for accounts, authentication and admin actions."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

PHONE_PATTERN = r"^\d{10}$"
OTP_PATTERN = r"^\d{6}$"


# ============================================================================
# AUTH
# ============================================================================


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str = Field(..., pattern=PHONE_PATTERN)


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=OTP_PATTERN)


class EmailRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=128)


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(MessageResponse):
    email: EmailStr


# ============================================================================
# ACCOUNT
# ============================================================================


class AccountResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: EmailStr
    phone: Optional[str] = None
    email_verified: bool
    is_approved: bool
    is_member: bool
    is_admin: bool
    is_suspended: bool
    suspension_reason: Optional[str] = None
    suspended_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    membership_paid_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountResponse


class AccountListResponse(BaseModel):
    items: List[AccountResponse]
    total: int
    page: int
    limit: int
    pages: int


# ============================================================================
# ADMIN
# ============================================================================


class SuspendRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class BulkActionRequest(BaseModel):
    account_ids: List[uuid.UUID] = Field(..., min_length=1)


class BulkActionResponse(BaseModel):
    """Aggregate outcome of a bulk admin action."""

    message: str
    requested: int
    processed: int


class MarkMemberRequest(BaseModel):
    note: Optional[str] = Field(None, max_length=200)


# ============================================================================
# INTERNAL
# ============================================================================


class MembershipActivation(BaseModel):
    order_id: str
    payment_id: str
    amount: int
