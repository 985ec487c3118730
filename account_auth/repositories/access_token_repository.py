"""Repository for PersonalAccessToken operations.

Tokens are stored as SHA-256 digests. Lookups are by digest only; the
cleartext never reaches this layer.
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.models.personal_access_token import PersonalAccessToken


class AccessTokenRepository:
    """Stateless repository for personal_access_tokens table operations.

    All methods are static — no instance state.
    """

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        name: str,
        token_hash: str,
    ) -> PersonalAccessToken:
        """Store a new access token record.

        Args:
            db: Async database session.
            user_id: Owning user.
            name: Token label.
            token_hash: SHA-256 hex digest of the cleartext token.

        Returns:
            Created PersonalAccessToken.
        """
        record = PersonalAccessToken(
            user_id=user_id,
            name=name,
            token_hash=token_hash,
        )
        db.add(record)
        await db.flush()
        await db.refresh(record)
        return record

    @staticmethod
    async def get_by_hash(
        db: AsyncSession, token_hash: str
    ) -> PersonalAccessToken | None:
        """Look up a token record by digest.

        Args:
            db: Async database session.
            token_hash: SHA-256 hex digest of the presented token.

        Returns:
            PersonalAccessToken if found, None otherwise.
        """
        stmt = select(PersonalAccessToken).where(
            PersonalAccessToken.token_hash == token_hash
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def touch(
        db: AsyncSession, record: PersonalAccessToken, used_at: datetime
    ) -> None:
        """Record a successful authentication with this token."""
        record.last_used_at = used_at
        await db.flush()

    @staticmethod
    async def delete(db: AsyncSession, token_id: uuid.UUID) -> int:
        """Delete one token record.

        Args:
            db: Async database session.
            token_id: Primary key of the token record.

        Returns:
            Number of deleted rows (0 if it was already gone).
        """
        stmt = delete(PersonalAccessToken).where(PersonalAccessToken.id == token_id)
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count
