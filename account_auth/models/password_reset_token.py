"""Password reset token model.

One row per email address. A new forgot-password request replaces the
previous row, so the latest request is the only one that can succeed.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from account_auth.core.clock import utcnow
from account_auth.models.base import Base


class PasswordResetToken(Base):
    """Single-use password reset token.

    No id column; keyed by email like the user directory lookup.

    Attributes:
        email: Address the reset was requested for (lower-case).
        token: bcrypt hash of the cleartext token.
        created_at: Issuance time. The token expires a fixed window after it.
    """

    __tablename__ = "password_reset_tokens"

    email: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    token: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
