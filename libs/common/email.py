"""
Transactional email sending over SMTP.

When SMTP credentials are not configured (local and test environments) the
message is logged instead of sent, and the send reports ``False``.
"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _deliver(to_email: str, msg, sender_email: str) -> None:
    settings = get_settings()
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
        server.starttls()
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.sendmail(sender_email, to_email, msg.as_string())


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
) -> bool:
    """
    Send an email through the configured SMTP relay.

    Returns:
        True if the email was handed to the relay, False otherwise
    """
    settings = get_settings()

    if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
        logger.info(f"SMTP not configured; would have sent email to {to_email}: {subject}")
        logger.debug(f"Email body: {body[:200]}...")
        return False

    sender_email = settings.DEFAULT_FROM_EMAIL

    if html_body:
        msg = MIMEMultipart("alternative")
        msg.attach(MIMEText(body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
    else:
        msg = MIMEText(body, "plain")

    msg["Subject"] = subject
    msg["From"] = f"{settings.DEFAULT_FROM_NAME} <{sender_email}>"
    msg["To"] = to_email

    try:
        await asyncio.to_thread(_deliver, to_email, msg, sender_email)
    except smtplib.SMTPAuthenticationError as e:
        logger.error(f"SMTP authentication failed: {e}")
        return False
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"SMTP error sending email to {to_email}: {e}")
        return False

    logger.info(f"Email sent successfully to {to_email}")
    return True


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


async def send_otp_email(to_email: str, name: str, otp: str) -> bool:
    settings = get_settings()
    return await send_email(
        to_email,
        f"Your {settings.ORGANIZATION_NAME} verification code",
        f"Hello {name},\n\nYour verification code is {otp}. "
        f"It expires in {settings.OTP_EXPIRES_MINUTES} minutes.",
    )


async def send_welcome_email(to_email: str, name: str) -> bool:
    settings = get_settings()
    return await send_email(
        to_email,
        f"Welcome to {settings.ORGANIZATION_NAME}",
        f"Hello {name},\n\nYour account has been approved. "
        f"You can now sign in at {settings.FRONTEND_URL}/login.",
    )


async def send_password_reset_email(to_email: str, name: str, token: str) -> bool:
    settings = get_settings()
    link = f"{settings.FRONTEND_URL}/reset-password?token={token}"
    return await send_email(
        to_email,
        "Reset your password",
        f"Hello {name},\n\nUse the link below to reset your password. "
        f"It expires in {settings.PASSWORD_RESET_EXPIRES_MINUTES} minutes.\n\n{link}",
    )


async def send_membership_confirmation(to_email: str, name: str, amount: int) -> bool:
    settings = get_settings()
    return await send_email(
        to_email,
        "Lifetime membership confirmed",
        f"Hello {name},\n\nWe received your membership payment of "
        f"{settings.PAYMENT_CURRENCY} {amount / 100:.2f}. Welcome aboard!",
    )


async def send_profile_activated_email(to_email: str, name: str, profile_id: str) -> bool:
    settings = get_settings()
    return await send_email(
        to_email,
        "Your matrimony profile is live",
        f"Hello {name},\n\nYour matrimony profile is now listed: "
        f"{settings.FRONTEND_URL}/matrimony/profile/{profile_id}",
    )
