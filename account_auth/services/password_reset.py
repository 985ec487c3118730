"""Password reset token broker.

Lifecycle of a reset token:

1. request_reset(): if the account exists (and was not sent a token in the
   last throttle window) a new random token is generated, its bcrypt hash
   replaces any earlier row for the email, and the cleartext is handed
   back for mailing.
2. complete_reset(): the presented token is checked with the credential
   verifier and against the 60-minute window. On success the password
   is replaced, the token row deleted and the remember token rotated.

The caller of request_reset() must render every ResetLinkStatus the same
way; only the mail side effect differs.
"""

import enum
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.core import events
from account_auth.core.auth import hash_password, verify_password
from account_auth.core.clock import ensure_utc, utcnow
from account_auth.core.config import settings
from account_auth.repositories.password_reset_token_repository import (
    PasswordResetTokenRepository,
)
from account_auth.repositories.user_repository import UserRepository

logger = structlog.get_logger()

# 64 hex characters (256 bits)
_TOKEN_BYTES = 32

# Length of the rotated remember token
_REMEMBER_TOKEN_LENGTH = 60


class ResetLinkStatus(enum.Enum):
    """Internal outcome of a reset request. Never shown to the client."""

    SENT = "sent"
    THROTTLED = "throttled"
    UNKNOWN_USER = "unknown_user"


class ResetOutcome(enum.Enum):
    """Every outcome of a reset attempt."""

    SUCCESS = "success"
    INVALID_TOKEN = "invalid_token"
    INVALID_USER = "invalid_user"


@dataclass(frozen=True)
class ResetRequest:
    """Result of request_reset().

    Attributes:
        status: What happened internally.
        email: Normalized address the request was for.
        token: Cleartext token to mail; set only when status is SENT.
    """

    status: ResetLinkStatus
    email: str
    token: str | None = None


def _spend_hashing_time() -> None:
    # Same bcrypt cost as a real token so latency does not reveal the branch
    hash_password(secrets.token_hex(_TOKEN_BYTES))


def _ttl() -> timedelta:
    return timedelta(minutes=settings.password_reset_ttl_minutes)


def is_expired(created_at: datetime, now: datetime) -> bool:
    """A token is expired at or after created_at + TTL."""
    return ensure_utc(now) >= ensure_utc(created_at) + _ttl()


async def request_reset(
    db: AsyncSession, email: str, now: datetime | None = None
) -> ResetRequest:
    """Issue a reset token for an email if the account exists.

    Args:
        db: Async database session.
        email: Address entered on the forgot-password form.
        now: Reference time. Defaults to the current time.

    Returns:
        ResetRequest; ``token`` is populated only when a mail should go out.
    """
    normalized = email.strip().lower()
    moment = now or utcnow()

    user = await UserRepository.get_by_email(db, normalized)
    if user is None:
        logger.info("password_reset.requested", status="unknown_user")
        _spend_hashing_time()
        return ResetRequest(status=ResetLinkStatus.UNKNOWN_USER, email=normalized)

    existing = await PasswordResetTokenRepository.get(db, email=normalized)
    throttle = timedelta(seconds=settings.password_reset_throttle_seconds)
    if existing is not None and ensure_utc(existing.created_at) + throttle > moment:
        logger.info(
            "password_reset.requested", status="throttled", user_id=str(user.id)
        )
        _spend_hashing_time()
        return ResetRequest(status=ResetLinkStatus.THROTTLED, email=normalized)

    token = secrets.token_hex(_TOKEN_BYTES)
    await PasswordResetTokenRepository.replace(
        db,
        email=normalized,
        token_hash=hash_password(token),
        created_at=moment,
    )
    logger.info("password_reset.requested", status="sent", user_id=str(user.id))
    return ResetRequest(status=ResetLinkStatus.SENT, email=normalized, token=token)


async def complete_reset(
    db: AsyncSession,
    *,
    email: str,
    token: str,
    new_password: str,
    now: datetime | None = None,
) -> ResetOutcome:
    """Consume a reset token and replace the account password.

    Args:
        db: Async database session.
        email: Address the token was issued for.
        token: Cleartext token from the reset link.
        new_password: Already-validated new password.
        now: Reference time. Defaults to the current time.

    Returns:
        SUCCESS, INVALID_TOKEN or INVALID_USER.
    """
    normalized = email.strip().lower()
    moment = now or utcnow()

    user = await UserRepository.get_by_email(db, normalized)
    if user is None:
        return ResetOutcome.INVALID_USER

    record = await PasswordResetTokenRepository.get(db, email=normalized)
    # verify_password runs even without a record so timing stays flat
    matches = verify_password(token, record.token if record else None)
    if record is None or not matches or is_expired(record.created_at, moment):
        logger.info("password_reset.rejected", user_id=str(user.id))
        return ResetOutcome.INVALID_TOKEN

    await UserRepository.update(
        db,
        user.id,
        password_hash=hash_password(new_password),
        remember_token=secrets.token_urlsafe(_REMEMBER_TOKEN_LENGTH)[
            :_REMEMBER_TOKEN_LENGTH
        ],
    )
    await PasswordResetTokenRepository.delete_for_email(db, email=normalized)
    events.password_reset(user.id)
    return ResetOutcome.SUCCESS


async def purge_expired(db: AsyncSession, now: datetime | None = None) -> int:
    """Delete reset tokens whose validity window has closed.

    Args:
        db: Async database session.
        now: Reference time. Defaults to the current time.

    Returns:
        Number of deleted rows.
    """
    cutoff = (now or utcnow()) - _ttl()
    deleted = await PasswordResetTokenRepository.delete_created_before(db, cutoff)
    logger.info("password_reset.purged", deleted=deleted)
    return deleted
