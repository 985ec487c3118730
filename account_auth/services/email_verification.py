"""Email verification flow on top of the signed link codec.

Keeps the side effects (marking the address, firing the verified event)
out of the codec so a second visit to the same link can never repeat
them.
"""

import uuid
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.core import events
from account_auth.core.clock import utcnow
from account_auth.models.user import User
from account_auth.repositories.user_repository import UserRepository
from account_auth.services import signed_links
from account_auth.services.signed_links import VerificationOutcome

logger = structlog.get_logger()


def verification_url(user: User, now: datetime | None = None) -> str:
    """Fresh signed verification URL for a user's current email."""
    return signed_links.build_url(signed_links.generate(user, now))


async def confirm(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    email_hash: str,
    expires: int,
    signature: str,
    now: datetime | None = None,
) -> tuple[VerificationOutcome, User | None]:
    """Verify a link and, on success, mark the email as verified.

    The verified event fires only when this call is the one that set the
    timestamp. A concurrent visit that loses the race reports
    ALREADY_VERIFIED instead.

    Args:
        db: Async database session.
        user_id: ``{id}`` path component.
        email_hash: ``{hash}`` path component.
        expires: ``expires`` query value.
        signature: ``signature`` query value.
        now: Reference time. Defaults to the current time.

    Returns:
        (outcome, user). user is None only for USER_NOT_FOUND.
    """
    moment = now or utcnow()
    outcome, user = await signed_links.verify(
        db,
        user_id=user_id,
        email_hash=email_hash,
        expires=expires,
        signature=signature,
        now=moment,
    )
    if outcome is not VerificationOutcome.VERIFIED or user is None:
        logger.info(
            "email_verification.rejected",
            user_id=str(user_id),
            outcome=outcome.value,
        )
        return outcome, user

    if not await UserRepository.mark_email_verified(db, user.id, moment):
        return VerificationOutcome.ALREADY_VERIFIED, user

    events.email_verified(user.id)
    return VerificationOutcome.VERIFIED, user
