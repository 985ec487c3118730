"""Password reset endpoints.

Endpoints:
- POST /forgot-password: request a reset link by email
- POST /reset-password: consume a reset token and set a new password

Security: /forgot-password answers identically whether or not the address
belongs to an account, and whether or not the request was throttled.
"""

from fastapi import APIRouter, BackgroundTasks, Request

from account_auth.api.deps import DbSession
from account_auth.core.auth import validate_password_strength
from account_auth.core.config import settings
from account_auth.core.email import send_password_reset_email
from account_auth.core.errors import InvalidLinkError, field_error
from account_auth.core.rate_limiting import limiter
from account_auth.core.responses import MessageResponse
from account_auth.schemas.auth import ForgotPasswordRequest, ResetPasswordRequest
from account_auth.services import password_reset
from account_auth.services.password_reset import ResetLinkStatus, ResetOutcome

router = APIRouter()

_GENERIC_FORGOT_MSG = (
    "If that email address exists in our system, we have sent a password "
    "reset link."
)


# ===================================================================
# POST /forgot-password
# ===================================================================


@router.post("/forgot-password")
@limiter.limit(settings.rate_limit_password_reset)
async def forgot_password(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: DbSession,
) -> MessageResponse:
    """Send a reset link if the address belongs to an account.

    Rate limit: settings.rate_limit_password_reset per client.
    """
    result = await password_reset.request_reset(db, body.email)
    await db.commit()

    if result.status is ResetLinkStatus.SENT and result.token:
        background_tasks.add_task(
            send_password_reset_email,
            to_email=result.email,
            token=result.token,
        )

    return MessageResponse(message=_GENERIC_FORGOT_MSG)


# ===================================================================
# POST /reset-password
# ===================================================================


@router.post("/reset-password")
@limiter.limit(settings.rate_limit_password_reset)
async def reset_password(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: ResetPasswordRequest,
    db: DbSession,
) -> MessageResponse:
    """Replace the password of the account a reset token was issued for.

    Raises:
        ValidationError: 422 if the new password is too short or unconfirmed.
        InvalidLinkError: 400 with a ``token`` field error for a bad or
            expired token, or an ``email`` field error for an unknown user.
    """
    validate_password_strength(body.password, body.password_confirmation)

    outcome = await password_reset.complete_reset(
        db,
        email=body.email,
        token=body.token,
        new_password=body.password,
    )

    if outcome is ResetOutcome.INVALID_USER:
        raise InvalidLinkError(
            "Invalid user.",
            details=field_error(
                "email", "We cannot find a user with that email address."
            ),
        )
    if outcome is ResetOutcome.INVALID_TOKEN:
        raise InvalidLinkError(
            "Invalid or expired reset token.",
            details=field_error(
                "token", "The password reset token is invalid or has expired."
            ),
        )

    await db.commit()
    return MessageResponse(message="Password has been reset successfully.")
