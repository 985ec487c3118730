"""Response models.

Success bodies are flat objects (``{"user": ..., "message": ...}``) because
the front-end reads them directly. Errors share one envelope so clients can
always read ``message`` and, for field problems, ``error.details``.
"""

from pydantic import BaseModel

from account_auth.schemas.user import UserResponse


class MessageResponse(BaseModel):
    """Body carrying only a human-readable message."""

    message: str


class UserEnvelope(BaseModel):
    """Body for GET /user."""

    user: UserResponse


class UserMessageResponse(BaseModel):
    """Body for endpoints returning the updated user plus a message."""

    user: UserResponse
    message: str


class TokenResponse(BaseModel):
    """Body for login and registration.

    ``access_token`` is the only place the cleartext bearer token ever
    appears.
    """

    user: UserResponse
    access_token: str
    token_type: str = "Bearer"
    message: str | None = None


class ErrorDetail(BaseModel):
    """Error detail for response body.

    Attributes:
        code: Machine-readable error code (e.g., "INVALID_LINK").
        message: Human-readable error message.
        details: Optional list of field-level errors.
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse.build(exc.code, exc.message).model_dump(),
        )
    """

    message: str
    error: ErrorDetail

    @classmethod
    def build(
        cls, code: str, message: str, details: list[dict] | None = None
    ) -> "ErrorResponse":
        """Create an envelope whose top-level message mirrors the detail."""
        return cls(
            message=message,
            error=ErrorDetail(code=code, message=message, details=details),
        )
