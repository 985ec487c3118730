"""Email sending via Resend API.

Plain-text messages for the two account mails: email verification and
password reset. Both run as background tasks, so delivery failures are
logged here and never reach the HTTP response.
"""

import logging
from urllib.parse import quote, urlencode

import httpx

from account_auth.core.config import settings

logger = logging.getLogger(__name__)

_RESEND_API_URL = "https://api.resend.com/emails"
_RESEND_TIMEOUT = 10.0


async def _send(*, to_email: str, subject: str, text: str) -> None:
    """POST one message to Resend, logging (not raising) on failure."""
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                _RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {settings.resend_api_key.get_secret_value()}",
                },
                json={
                    "from": settings.email_from,
                    "to": to_email,
                    "subject": subject,
                    "text": text,
                },
                timeout=_RESEND_TIMEOUT,
            )
            resp.raise_for_status()
    except Exception:
        logger.warning("Failed to send %r email", subject, exc_info=True)


async def send_verification_email(*, to_email: str, name: str, url: str) -> None:
    """Send the email verification link.

    Args:
        to_email: Recipient email address.
        name: Recipient display name for the greeting.
        url: Signed verification URL.
    """
    ttl = settings.verification_link_ttl_minutes
    await _send(
        to_email=to_email,
        subject="Verify Email Address",
        text=(
            f"Hello {name},\n\n"
            "Thank you for registering. Please verify your email address "
            f"by opening the link below:\n\n{url}\n\n"
            f"This verification link will expire in {ttl} minutes.\n\n"
            "If you did not create an account, no further action is required."
        ),
    )


def password_reset_url(*, email: str, token: str) -> str:
    """Front-end URL for the reset form, carrying the token and email."""
    params = urlencode({"token": token, "email": email}, quote_via=quote)
    return f"{settings.frontend_url}/reset-password?{params}"


async def send_password_reset_email(*, to_email: str, token: str) -> None:
    """Send the password reset link.

    Args:
        to_email: Recipient email address.
        token: Plain (unhashed) reset token.
    """
    ttl = settings.password_reset_ttl_minutes
    url = password_reset_url(email=to_email, token=token)
    await _send(
        to_email=to_email,
        subject="Reset Password Notification",
        text=(
            "You are receiving this email because we received a password "
            f"reset request for your account.\n\n{url}\n\n"
            f"This password reset link will expire in {ttl} minutes.\n\n"
            "If you did not request a password reset, no further action is "
            "required."
        ),
    )
