"""Members Service models package.

Re-exports all models so that SQLAlchemy's mapper registry sees every model
class on import.
"""

from services.members_service.models.account import (  # noqa: F401
    Account,
    OneTimeCode,
    PasswordResetToken,
)

__all__ = [
    "Account",
    "OneTimeCode",
    "PasswordResetToken",
]
