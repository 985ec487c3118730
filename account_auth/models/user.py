"""User model - identity and credential record."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from account_auth.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from account_auth.models.personal_access_token import PersonalAccessToken


class User(Base, TimestampMixin):
    """User account.

    Attributes:
        id: UUID primary key.
        name: Display name given at registration.
        email: Unique email address, stored lower-case.
        password_hash: bcrypt hash. Never empty once the account exists.
        email_verified: Timestamp when email was verified. NULL = unverified.
            Set once by the verification flow, never cleared.
        contact_number: Phone number as entered at registration.
        profile_image: Storage path of the current profile image.
        remember_token: Long-lived session marker, rotated on password reset.
        created_at: Account creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email_verified: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )
    contact_number: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    profile_image: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    remember_token: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    access_tokens: Mapped[list["PersonalAccessToken"]] = relationship(
        "PersonalAccessToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def has_verified_email(self) -> bool:
        """Whether the email ownership check has been completed."""
        return self.email_verified is not None
