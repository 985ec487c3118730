"""Repository for User CRUD operations.

Provides database access for the users table. This is the user directory:
lookup by id/email, create, and guarded field updates.
"""

import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.models.user import User

# Fields that may be updated via UserRepository.update().
# Security: Never add 'id', 'email', 'created_at', or 'updated_at'.
# - id: primary key, immutable
# - email: unique identity; changing it would also void verification links
# - created_at/updated_at: server-managed timestamps
_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "email_verified",
        "contact_number",
        "profile_image",
        "password_hash",
        "remember_token",
    }
)


class UserRepository:
    """Stateless repository for User table operations.

    All methods are static — no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
        """Fetch a user by primary key.

        Args:
            db: Async database session.
            user_id: UUID primary key.

        Returns:
            User if found, None otherwise.
        """
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Fetch a user by email address (case-insensitive).

        Args:
            db: Async database session.
            email: Email address to look up.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.email == email.strip().lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        name: str,
        email: str,
        password_hash: str,
        contact_number: str | None = None,
        email_verified: datetime | None = None,
    ) -> User:
        """Create a new user.

        Email is normalized to lowercase before storage.

        Args:
            db: Async database session.
            name: Display name.
            email: User email address.
            password_hash: bcrypt hash of the chosen password.
            contact_number: Phone number as entered.
            email_verified: Timestamp when email was verified.

        Returns:
            Created User with database-generated fields populated.

        Raises:
            ValueError: If password_hash is empty.
            sqlalchemy.exc.IntegrityError: If email already exists.
        """
        if not password_hash:
            msg = "password_hash must not be empty"
            raise ValueError(msg)

        user = User(
            name=name,
            email=email.strip().lower(),
            password_hash=password_hash,
            contact_number=contact_number,
            email_verified=email_verified,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def update(
        db: AsyncSession,
        user_id: uuid.UUID,
        **kwargs: str | datetime | None,
    ) -> User | None:
        """Update user fields.

        Only fields in _UPDATABLE_FIELDS are allowed. Unknown field names
        raise ValueError. ``email_verified`` can be set but never cleared,
        and ``password_hash`` can never be emptied.

        Args:
            db: Async database session.
            user_id: UUID of the user to update.
            **kwargs: Field names and values to update.

        Returns:
            Updated User if found, None if user does not exist.

        Raises:
            ValueError: If an unknown field name is passed, or an update
                would clear email_verified or password_hash.
        """
        unknown = set(kwargs) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Unknown fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        if "email_verified" in kwargs and kwargs["email_verified"] is None:
            msg = "email_verified cannot be cleared"
            raise ValueError(msg)
        if "password_hash" in kwargs and not kwargs["password_hash"]:
            msg = "password_hash must not be empty"
            raise ValueError(msg)

        user = await db.get(User, user_id)
        if user is None:
            return None

        for field, value in kwargs.items():
            setattr(user, field, value)

        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def mark_email_verified(
        db: AsyncSession, user_id: uuid.UUID, verified_at: datetime
    ) -> bool:
        """Set email_verified only if it is still unset.

        The conditional UPDATE makes this safe under concurrent visits to
        the same link: exactly one caller sees True.

        Args:
            db: Async database session.
            user_id: UUID of the user.
            verified_at: Timestamp to record.

        Returns:
            True if this call set the timestamp, False if it was already set
            or the user does not exist.
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.email_verified.is_(None))
            .values(email_verified=verified_at)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count == 1
