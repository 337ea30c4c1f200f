from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Claims carried by a validated bearer token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"
    is_admin: bool = False

    @property
    def is_service(self) -> bool:
        return self.role == "service_role"


class AccountSnapshot(BaseModel):
    """
    The account flags the entitlement rules depend on.

    Fetched fresh from the members service on every gated request; the
    token alone is never trusted for approval/membership/suspension state.
    """

    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    is_approved: bool = False
    is_member: bool = False
    is_admin: bool = False
    is_suspended: bool = False
    suspension_reason: Optional[str] = None
    suspended_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
