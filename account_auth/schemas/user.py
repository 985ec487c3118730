"""User serialization.

The public shape of an account. Credential fields (password hash,
remember token) are never part of it.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from account_auth.core.storage import get_storage
from account_auth.models.user import User


class UserResponse(BaseModel):
    """Account as returned in ``user`` response fields."""

    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    name: str
    email: str
    contact_number: str | None
    email_verified_at: datetime | None
    profile_image: str | None
    profile_image_url: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Build the public representation of a User."""
        image_url = (
            get_storage().url(user.profile_image) if user.profile_image else None
        )
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            contact_number=user.contact_number,
            email_verified_at=user.email_verified,
            profile_image=user.profile_image,
            profile_image_url=image_url,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
