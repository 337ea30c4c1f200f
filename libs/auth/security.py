"""Password hashing and token issuing."""

import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now

settings = get_settings()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS)."""
    password_bytes = password.encode("utf-8")[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def create_access_token(
    subject: str,
    *,
    email: Optional[str] = None,
    is_admin: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed access token for an account."""
    expire = utc_now() + (expires_delta or timedelta(minutes=settings.JWT_EXPIRES_MINUTES))
    claims: Dict[str, Any] = {
        "sub": subject,
        "email": email,
        "role": "authenticated",
        "is_admin": is_admin,
        "exp": expire,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a token; raises jose.JWTError when invalid."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def _service_role_jwt(calling_service: str) -> str:
    """Short-lived token for service-to-service calls."""
    expire = utc_now() + timedelta(seconds=settings.SERVICE_TOKEN_TTL_SECONDS)
    claims = {"sub": f"service:{calling_service}", "role": "service_role", "exp": expire}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def generate_otp(length: Optional[int] = None) -> str:
    length = length or settings.OTP_LENGTH
    return "".join(secrets.choice("0123456789") for _ in range(length))


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)
