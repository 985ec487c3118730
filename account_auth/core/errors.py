"""API error classes.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
- Type-safe error handling in services and routers

Taxonomy:
- ValidationError (422): malformed or missing input, field-scoped
- UnauthorizedError (401): missing/invalid bearer token, uniform message
- ConflictError (422): duplicate email on register
- InvalidLinkError (400): verification link or reset token expired/tampered
- AlreadyVerifiedError (400): informational, email already verified
- ProcessingFailureError (422): image decode/transform failure
- InternalError (500): anything unhandled
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "UNAUTHORIZED").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of field-scoped error details, each shaped
            ``{"field": ..., "error": ...}``.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


def field_error(field: str, error: str) -> list[dict]:
    """Build a single-entry details list scoped to one request field."""
    return [{"field": field, "error": error}]


class ValidationError(APIError):
    """Field validation failed (422).

    Use for request body validation errors that pydantic cannot express,
    e.g. wrong credentials reported against the ``email`` field.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=422,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Security: the message never says WHY authentication failed.
    """

    def __init__(self, message: str = "Unauthenticated.") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ConflictError(APIError):
    """Duplicate resource (422).

    Registration reports a taken email as a field error, the same way any
    other invalid field is reported.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details,
        )


class InvalidLinkError(APIError):
    """Verification link or reset token is invalid or expired (400)."""

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="INVALID_LINK",
            message=message,
            status_code=400,
            details=details,
        )


class AlreadyVerifiedError(APIError):
    """Email address is already verified (400).

    Not a failure of the account: the desired state already holds.
    """

    def __init__(self, message: str = "Email already verified.") -> None:
        super().__init__(
            code="ALREADY_VERIFIED",
            message=message,
            status_code=400,
        )


class ProcessingFailureError(APIError):
    """Uploaded content could not be processed (422).

    Never carries the underlying exception text.
    """

    def __init__(
        self,
        message: str = "Failed to process image. Please try another file.",
    ) -> None:
        super().__init__(
            code="PROCESSING_FAILED",
            message=message,
            status_code=422,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )
