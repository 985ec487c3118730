"""Request bodies for the authentication endpoints.

All schemas use ConfigDict(extra="forbid") to reject unexpected fields.
Password length and confirmation are checked in the handlers with
validate_password_strength() so every password rule reports the same way.
"""

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from account_auth.core.phone import validate_phone_number

_MAX_PASSWORD_FIELD = 128


class RegisterRequest(BaseModel):
    """Request body for POST /register.

    ``contact`` is accepted as an alias of ``contact_number``.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    contact_number: str = Field(
        min_length=1,
        max_length=20,
        validation_alias=AliasChoices("contact_number", "contact"),
    )
    password: str = Field(min_length=1, max_length=_MAX_PASSWORD_FIELD)
    password_confirmation: str | None = Field(None, max_length=_MAX_PASSWORD_FIELD)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            msg = "The name field is required."
            raise ValueError(msg)
        return stripped

    @field_validator("contact_number")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        return validate_phone_number(value, "contact_number")


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=_MAX_PASSWORD_FIELD)


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /forgot-password."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request body for POST /reset-password."""

    model_config = ConfigDict(extra="forbid")

    token: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=1, max_length=_MAX_PASSWORD_FIELD)
    password_confirmation: str | None = Field(None, max_length=_MAX_PASSWORD_FIELD)
