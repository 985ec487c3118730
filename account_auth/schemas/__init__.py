"""Pydantic request/response schemas for API endpoints."""

from account_auth.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from account_auth.schemas.user import UserResponse

__all__ = [
    "ForgotPasswordRequest",
    "LoginRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "UserResponse",
]
