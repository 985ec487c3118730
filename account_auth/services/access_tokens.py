"""Bearer token issuance, authentication and revocation.

Tokens are 256-bit random secrets. The database only ever sees the
SHA-256 digest, which doubles as the lookup key. Every failure in
authenticate() collapses to None so callers cannot tell "unknown" from
"malformed".
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.core.clock import utcnow
from account_auth.models.personal_access_token import PersonalAccessToken
from account_auth.models.user import User
from account_auth.repositories.access_token_repository import AccessTokenRepository
from account_auth.repositories.user_repository import UserRepository

logger = structlog.get_logger()

DEFAULT_TOKEN_NAME = "auth_token"

# 32 random bytes -> 43 url-safe characters
_TOKEN_BYTES = 32

# Anything longer than this cannot be a token we issued
_MAX_PRESENTED_LENGTH = 256


@dataclass(frozen=True)
class IssuedToken:
    """Result of issuing a token.

    Attributes:
        plain_text: The cleartext bearer token. Shown once, never stored.
        record: The persisted token record (digest only).
    """

    plain_text: str
    record: PersonalAccessToken


@dataclass(frozen=True)
class AuthenticatedSession:
    """A resolved bearer token: the owning user and the token record used."""

    user: User
    token: PersonalAccessToken


def hash_token(plain_text: str) -> str:
    """SHA-256 hex digest used as the stored lookup key."""
    return hashlib.sha256(plain_text.encode()).hexdigest()


async def issue_token(
    db: AsyncSession, user: User, name: str = DEFAULT_TOKEN_NAME
) -> IssuedToken:
    """Mint a new bearer token for a user.

    No cap on concurrent tokens: every login adds one.

    Args:
        db: Async database session.
        user: Owner of the token.
        name: Label stored with the record.

    Returns:
        IssuedToken with the cleartext and the stored record.
    """
    plain_text = secrets.token_urlsafe(_TOKEN_BYTES)
    record = await AccessTokenRepository.create(
        db,
        user_id=user.id,
        name=name,
        token_hash=hash_token(plain_text),
    )
    logger.info("access_token.issued", user_id=str(user.id), token_id=str(record.id))
    return IssuedToken(plain_text=plain_text, record=record)


async def authenticate(
    db: AsyncSession, presented: str | None
) -> AuthenticatedSession | None:
    """Resolve a presented bearer token to its user.

    Args:
        db: Async database session.
        presented: Cleartext token from the Authorization header.

    Returns:
        AuthenticatedSession on success, None for any failure.
    """
    if not presented or len(presented) > _MAX_PRESENTED_LENGTH:
        return None

    digest = hash_token(presented)
    record = await AccessTokenRepository.get_by_hash(db, digest)
    if record is None or not hmac.compare_digest(record.token_hash, digest):
        return None

    user = await UserRepository.get_by_id(db, record.user_id)
    if user is None:
        return None

    await AccessTokenRepository.touch(db, record, utcnow())
    return AuthenticatedSession(user=user, token=record)


async def revoke(db: AsyncSession, record: PersonalAccessToken) -> None:
    """Delete exactly one token record.

    Revoking a record that is already gone is a no-op.

    Args:
        db: Async database session.
        record: The token used for the current request.
    """
    token_id, user_id = record.id, record.user_id
    deleted = await AccessTokenRepository.delete(db, token_id)
    logger.info(
        "access_token.revoked",
        user_id=str(user_id),
        token_id=str(token_id),
        deleted=deleted,
    )
