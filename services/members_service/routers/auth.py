"""Registration, one-time code verification, login and password reset."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.security import (
    create_access_token,
    generate_otp,
    generate_reset_token,
    get_password_hash,
    verify_password,
)
from libs.common.config import get_settings
from libs.common.datetime_utils import ensure_aware, minutes_from_now, utc_now
from libs.common.email import (
    send_otp_email,
    send_password_reset_email,
)
from libs.common.error_handler import ServiceError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from services.members_service.models import Account, OneTimeCode, PasswordResetToken
from services.members_service.routers._helpers import (
    get_account_by_email,
    get_current_account_row,
)
from services.members_service.schemas import (
    AccountResponse,
    EmailRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
    VerifyOtpRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)
settings = get_settings()


def _issue_token(account: Account) -> TokenResponse:
    token = create_access_token(
        str(account.id), email=account.email, is_admin=account.is_admin
    )
    return TokenResponse(
        access_token=token, account=AccountResponse.model_validate(account)
    )


async def _issue_otp(db: AsyncSession, account: Account) -> str:
    # Only the most recent code is valid.
    await db.execute(
        update(OneTimeCode)
        .where(OneTimeCode.account_id == account.id, OneTimeCode.used_at.is_(None))
        .values(used_at=utc_now())
    )
    code = generate_otp()
    db.add(
        OneTimeCode(
            account_id=account.id,
            code=code,
            expires_at=minutes_from_now(settings.OTP_EXPIRES_MINUTES),
        )
    )
    return code


@router.post(
    "/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create an unapproved account and e-mail a verification code."""
    email = payload.email.lower()
    if await get_account_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    account = Account(
        name=payload.name.strip(),
        email=email,
        phone=payload.phone,
        password_hash=get_password_hash(payload.password),
    )
    db.add(account)
    await db.flush()
    code = await _issue_otp(db, account)
    await db.commit()

    logger.info(f"Account registered: {account.id}")
    await send_otp_email(account.email, account.name, code)

    return RegisterResponse(
        message="Registration successful. Please verify your email with the OTP sent.",
        email=account.email,
    )


@router.post("/verify-otp", response_model=TokenResponse)
async def verify_otp(
    payload: VerifyOtpRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Consume a verification code and sign the account in."""
    account = await get_account_by_email(db, payload.email)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    result = await db.execute(
        select(OneTimeCode)
        .where(
            OneTimeCode.account_id == account.id,
            OneTimeCode.code == payload.otp,
            OneTimeCode.used_at.is_(None),
        )
        .order_by(OneTimeCode.created_at.desc())
    )
    otp = result.scalars().first()
    now = utc_now()
    if not otp or ensure_aware(otp.expires_at) <= now:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired OTP",
        )

    otp.used_at = now
    account.email_verified = True
    account.last_login = now
    await db.commit()
    await db.refresh(account)

    logger.info(f"Email verified for account {account.id}")
    return _issue_token(account)


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    payload: EmailRequest,
    db: AsyncSession = Depends(get_async_db),
):
    account = await get_account_by_email(db, payload.email)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    if account.email_verified:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already verified",
        )

    code = await _issue_otp(db, account)
    await db.commit()
    await send_otp_email(account.email, account.name, code)
    return MessageResponse(message="OTP sent successfully")


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Password login. Suspended accounts are refused with their reason."""
    account = await get_account_by_email(db, payload.email)
    if not account or not verify_password(payload.password, account.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if account.is_suspended:
        logger.warning(f"Login refused for suspended account {account.id}")
        raise ServiceError(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Account suspended. Reason: {account.suspension_reason or 'Not specified'}",
            code="ACCOUNT_SUSPENDED",
        )

    account.last_login = utc_now()
    await db.commit()
    await db.refresh(account)
    return _issue_token(account)


@router.get("/me", response_model=AccountResponse)
async def get_me(account: Account = Depends(get_current_account_row)):
    """
    Current account, including suspension and approval state.

    Not gated: the portal needs this to explain why a view is blocked.
    """
    return account


@router.post("/logout", response_model=MessageResponse)
async def logout(account: Account = Depends(get_current_account_row)):
    # Tokens are stateless; the client discards its copy.
    return MessageResponse(message="Logged out successfully")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: EmailRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Issue a reset token. Always answers the same way for unknown e-mails."""
    account = await get_account_by_email(db, payload.email)
    if account:
        token = generate_reset_token()
        db.add(
            PasswordResetToken(
                account_id=account.id,
                token=token,
                expires_at=minutes_from_now(settings.PASSWORD_RESET_EXPIRES_MINUTES),
            )
        )
        await db.commit()
        await send_password_reset_email(account.email, account.name, token)

    return MessageResponse(
        message="If that email is registered, a reset link has been sent"
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == payload.token)
    )
    reset = result.scalar_one_or_none()
    now = utc_now()
    if not reset or reset.used_at is not None or ensure_aware(reset.expires_at) <= now:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )

    result = await db.execute(select(Account).where(Account.id == reset.account_id))
    account = result.scalar_one()
    account.password_hash = get_password_hash(payload.password)
    reset.used_at = now
    await db.commit()

    logger.info(f"Password reset for account {account.id}")
    return MessageResponse(message="Password reset successful")
