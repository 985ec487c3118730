"""Personal access token model - bearer session credentials.

Only the SHA-256 digest of the token is stored. The cleartext is returned
once, in the login/registration response, and never persisted.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from account_auth.core.clock import utcnow
from account_auth.models.base import Base

if TYPE_CHECKING:
    from account_auth.models.user import User


class PersonalAccessToken(Base):
    """Bearer token bound to a user.

    A user may hold any number of live tokens (one per device/session).

    Attributes:
        id: UUID primary key.
        user_id: Owning user.
        name: Label given at issuance (e.g. ``"auth_token"``).
        token_hash: SHA-256 hex digest of the cleartext token.
        created_at: Issuance time.
        last_used_at: Last successful authentication with this token.
    """

    __tablename__ = "personal_access_tokens"
    __table_args__ = (Index("idx_personal_access_tokens_user_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    token_hash: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="access_tokens")
