from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: str = "http://localhost:5173"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    ORGANIZATION_NAME: str = "Blue City Positive Forum"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24 * 7
    SERVICE_TOKEN_TTL_SECONDS: int = 60
    BCRYPT_ROUNDS: int = 10
    OTP_LENGTH: int = 6
    OTP_EXPIRES_MINUTES: int = 10
    PASSWORD_RESET_EXPIRES_MINUTES: int = 60

    # Payments (amounts in paise)
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    MEMBERSHIP_FEE: int = 700000
    MATRIMONY_FEE: int = 40000
    PAYMENT_CURRENCY: str = "INR"

    # Matrimony
    MATRIMONY_DELETION_GRACE_DAYS: int = 14
    MATRIMONY_MAX_PHOTOS: int = 5
    MATRIMONY_MIN_AGE: int = 18
    MATRIMONY_CLEANUP_HOUR: int = 2

    # Media host
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_ROOT_FOLDER: str = "bluecity"
    CLOUDINARY_UPLOAD_TRANSFORMATION: str = "c_limit,h_1080,q_auto:good,w_1920"

    # Email (SMTP)
    SMTP_HOST: str = "smtp.mailgun.org"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    DEFAULT_FROM_EMAIL: str = "no-reply@bluecityforum.org"
    DEFAULT_FROM_NAME: str = "Blue City Positive Forum"

    # Infrastructure
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_ENABLED: bool = True

    # Microservices URLs
    MEMBERS_SERVICE_URL: str = "http://members-service:8001"
    MATRIMONY_SERVICE_URL: str = "http://matrimony-service:8002"
    PAYMENTS_SERVICE_URL: str = "http://payments-service:8003"
    MEDIA_SERVICE_URL: str = "http://media-service:8004"
    EVENTS_SERVICE_URL: str = "http://events-service:8005"

    # Portal client
    PORTAL_API_URL: str = "http://localhost:8000/api/v1"
    PORTAL_REQUEST_TIMEOUT_SECONDS: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def razorpay_enabled(self) -> bool:
        return bool(self.RAZORPAY_KEY_ID and self.RAZORPAY_KEY_SECRET)

    @property
    def cloudinary_enabled(self) -> bool:
        return bool(
            self.CLOUDINARY_CLOUD_NAME
            and self.CLOUDINARY_API_KEY
            and self.CLOUDINARY_API_SECRET
        )


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
