"""Members Service schemas package."""

from services.members_service.schemas.account import (  # noqa: F401
    AccountListResponse,
    AccountResponse,
    BulkActionRequest,
    BulkActionResponse,
    EmailRequest,
    LoginRequest,
    MarkMemberRequest,
    MembershipActivation,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SuspendRequest,
    TokenResponse,
    VerifyOtpRequest,
)
