"""Repository for PasswordResetToken operations.

Rows are keyed by email. Token values are bcrypt hashes, so matching a
presented token happens in the service via the credential verifier, not
in SQL.
"""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.models.password_reset_token import PasswordResetToken


class PasswordResetTokenRepository:
    """Stateless repository for password_reset_tokens table operations.

    All methods are static — no instance state.
    """

    @staticmethod
    async def get(db: AsyncSession, *, email: str) -> PasswordResetToken | None:
        """Fetch the reset token row for an email.

        Args:
            db: Async database session.
            email: Lower-case email address.

        Returns:
            PasswordResetToken if one exists, None otherwise.
        """
        stmt = select(PasswordResetToken).where(PasswordResetToken.email == email)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def replace(
        db: AsyncSession,
        *,
        email: str,
        token_hash: str,
        created_at: datetime,
    ) -> PasswordResetToken:
        """Store a token for an email, superseding any previous one.

        Args:
            db: Async database session.
            email: Lower-case email address.
            token_hash: bcrypt hash of the cleartext token.
            created_at: Issuance time (start of the validity window).

        Returns:
            The stored PasswordResetToken.
        """
        record = await db.get(PasswordResetToken, email)
        if record is None:
            record = PasswordResetToken(email=email)
            db.add(record)
        record.token = token_hash
        record.created_at = created_at
        await db.flush()
        return record

    @staticmethod
    async def delete_for_email(db: AsyncSession, *, email: str) -> None:
        """Delete all tokens for an email (cleanup on successful reset).

        Args:
            db: Async database session.
            email: Lower-case email address.
        """
        stmt = delete(PasswordResetToken).where(PasswordResetToken.email == email)
        await db.execute(stmt)

    @staticmethod
    async def delete_created_before(db: AsyncSession, cutoff: datetime) -> int:
        """Delete all tokens issued before ``cutoff`` (periodic cleanup).

        Args:
            db: Async database session.
            cutoff: Tokens created strictly before this time are removed.

        Returns:
            Number of deleted rows.
        """
        stmt = delete(PasswordResetToken).where(
            PasswordResetToken.created_at < cutoff,
        ).execution_options(synchronize_session=False)
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count
