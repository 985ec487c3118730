"""Stateless signed email-verification links.

A link is ``/email/verify/{user_id}/{hash}?expires={ts}&signature={sig}``:

- ``hash`` is the SHA-1 digest of the user's current email address
- ``signature`` is HMAC-SHA256(app_key, "{user_id}|{hash}|{expires}")

Nothing is stored. Verification recomputes both values from the user's
*current* email, so changing the address silently voids any outstanding
link.
"""

import enum
import hashlib
import hmac
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import urlencode

from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.core.clock import utcnow
from account_auth.core.config import settings
from account_auth.models.user import User
from account_auth.repositories.user_repository import UserRepository


class VerificationOutcome(enum.Enum):
    """Every terminal state of a verification attempt."""

    VERIFIED = "verified"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    ALREADY_VERIFIED = "already_verified"
    USER_NOT_FOUND = "user_not_found"


@dataclass(frozen=True)
class VerificationLink:
    """The components of a signed verification link.

    Attributes:
        user_id: Account the link belongs to.
        email_hash: SHA-1 hex digest of the email at send time.
        expires: Unix timestamp after which the link is rejected.
        signature: HMAC-SHA256 hex over the three values above.
    """

    user_id: uuid.UUID
    email_hash: str
    expires: int
    signature: str

    @property
    def path(self) -> str:
        """Route path below the API prefix."""
        return f"/email/verify/{self.user_id}/{self.email_hash}"

    @property
    def query(self) -> str:
        """Query string carrying expiry and signature."""
        return urlencode({"expires": self.expires, "signature": self.signature})


def email_digest(email: str) -> str:
    """SHA-1 hex digest identifying an email address."""
    return hashlib.sha1(email.strip().lower().encode()).hexdigest()  # nosec B324


def sign(user_id: uuid.UUID | str, email_hash: str, expires: int, key: str) -> str:
    """HMAC-SHA256 over the canonical encoding of the link values."""
    message = f"{user_id}|{email_hash}|{expires}".encode()
    return hmac.new(key.encode(), message, hashlib.sha256).hexdigest()


def _app_key() -> str:
    return settings.app_key.get_secret_value()


def generate(user: User, now: datetime | None = None) -> VerificationLink:
    """Build a fresh verification link for a user.

    Args:
        user: Account whose current email is bound into the link.
        now: Reference time. Defaults to the current time.

    Returns:
        VerificationLink valid for settings.verification_link_ttl_minutes.
    """
    issued = now or utcnow()
    expires = int(
        (issued + timedelta(minutes=settings.verification_link_ttl_minutes)).timestamp()
    )
    digest = email_digest(user.email)
    return VerificationLink(
        user_id=user.id,
        email_hash=digest,
        expires=expires,
        signature=sign(user.id, digest, expires, _app_key()),
    )


def build_url(link: VerificationLink) -> str:
    """Absolute URL for a link, pointing at the API directly."""
    return f"{settings.backend_url}{settings.api_prefix}{link.path}?{link.query}"


async def verify(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    email_hash: str,
    expires: int,
    signature: str,
    now: datetime | None = None,
) -> tuple[VerificationOutcome, User | None]:
    """Check a presented verification link.

    Order: unknown user, already verified, digest/signature mismatch,
    expiry. Only VERIFIED means the caller should mark the email.

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
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        return VerificationOutcome.USER_NOT_FOUND, None

    if user.has_verified_email:
        return VerificationOutcome.ALREADY_VERIFIED, user

    expected_hash = email_digest(user.email)
    expected_signature = sign(user.id, expected_hash, expires, _app_key())
    # Evaluate both comparisons so timing does not reveal which part failed
    hash_ok = hmac.compare_digest(email_hash.encode(), expected_hash.encode())
    signature_ok = hmac.compare_digest(
        signature.encode(), expected_signature.encode()
    )
    if not (hash_ok and signature_ok):
        return VerificationOutcome.MISMATCH, user

    current = (now or utcnow()).timestamp()
    if current >= expires:
        return VerificationOutcome.EXPIRED, user

    return VerificationOutcome.VERIFIED, user
