"""SQLAlchemy ORM models.

All models are exported from this module for convenient imports:
    from account_auth.models import User, PersonalAccessToken, ...

- user.py: User
- personal_access_token.py: PersonalAccessToken (bearer tokens)
- password_reset_token.py: PasswordResetToken (keyed by email)
"""

from account_auth.models.base import Base, TimestampMixin
from account_auth.models.password_reset_token import PasswordResetToken
from account_auth.models.personal_access_token import PersonalAccessToken
from account_auth.models.user import User

__all__ = [
    "Base",
    "PasswordResetToken",
    "PersonalAccessToken",
    "TimestampMixin",
    "User",
]
