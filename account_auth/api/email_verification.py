"""Email verification endpoints.

Endpoints:
- GET /email/verify/{user_id}/{hash}: consume a signed verification link
- POST /email/verification-notification: mail a fresh link (bearer auth)

The verify route is opened from a mail client, so it answers with an HTML
page unless the request asks for JSON.
"""

import uuid

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import HTMLResponse, JSONResponse

from account_auth.api.deps import CurrentUser, DbSession
from account_auth.core.config import settings
from account_auth.core.email import send_verification_email
from account_auth.core.errors import AlreadyVerifiedError, InvalidLinkError
from account_auth.core.pages import verification_page
from account_auth.core.rate_limiting import limiter
from account_auth.core.responses import MessageResponse
from account_auth.services import email_verification
from account_auth.services.signed_links import VerificationOutcome

router = APIRouter()

_VERIFIED_MSG = "Email verified successfully."
_ALREADY_VERIFIED_MSG = "Email already verified."
_INVALID_LINK_MSG = "Invalid verification link."

# Messages for the browser page, keyed by failing outcome
_PAGE_ERRORS = {
    VerificationOutcome.USER_NOT_FOUND: (
        "Verification failed. The link may have expired or is invalid."
    ),
    VerificationOutcome.MISMATCH: (
        "Invalid verification link. The link may have expired or is invalid."
    ),
    VerificationOutcome.EXPIRED: "This verification link has expired.",
}


def _wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "json" in accept.lower()


def _parse_user_id(raw: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def _parse_expires(raw: str | None) -> int:
    # An unparseable expiry can never match a signature, so 0 is safe
    try:
        return int(raw) if raw is not None else 0
    except ValueError:
        return 0


# ===================================================================
# GET /email/verify/{user_id}/{hash}
# ===================================================================


@router.get("/email/verify/{user_id}/{email_hash}", response_model=None)
async def verify_email(
    request: Request,
    user_id: str,
    email_hash: str,
    db: DbSession,
    expires: str | None = None,
    signature: str | None = None,
) -> JSONResponse | HTMLResponse:
    """Consume a signed verification link.

    JSON clients get 200 on success and the error envelope (400) for
    every other outcome. Browsers get an HTML status page.
    """
    parsed_id = _parse_user_id(user_id)
    if parsed_id is None:
        outcome, user = VerificationOutcome.USER_NOT_FOUND, None
    else:
        outcome, user = await email_verification.confirm(
            db,
            user_id=parsed_id,
            email_hash=email_hash,
            expires=_parse_expires(expires),
            signature=signature or "",
        )
        await db.commit()

    if _wants_json(request):
        return _json_result(outcome)
    return _html_result(request, outcome, user.name if user else None)


def _json_result(outcome: VerificationOutcome) -> JSONResponse:
    if outcome is VerificationOutcome.VERIFIED:
        return JSONResponse(
            content=MessageResponse(message=_VERIFIED_MSG).model_dump()
        )
    if outcome is VerificationOutcome.ALREADY_VERIFIED:
        raise AlreadyVerifiedError(_ALREADY_VERIFIED_MSG)
    raise InvalidLinkError(_INVALID_LINK_MSG)


def _html_result(
    request: Request, outcome: VerificationOutcome, name: str | None
) -> HTMLResponse:
    if outcome is VerificationOutcome.VERIFIED:
        return verification_page(request, "success", name=name)
    if outcome is VerificationOutcome.ALREADY_VERIFIED:
        return verification_page(request, "already_verified")
    return verification_page(
        request, "error", message=_PAGE_ERRORS[outcome], status_code=400
    )


# ===================================================================
# POST /email/verification-notification
# ===================================================================


@router.post("/email/verification-notification")
@limiter.limit(settings.rate_limit_auth)
async def resend_verification(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    user: CurrentUser,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    """Mail a fresh verification link to the authenticated user.

    Raises:
        AlreadyVerifiedError: 400 if the address is already verified.
    """
    if user.has_verified_email:
        raise AlreadyVerifiedError(_ALREADY_VERIFIED_MSG)

    background_tasks.add_task(
        send_verification_email,
        to_email=user.email,
        name=user.name,
        url=email_verification.verification_url(user),
    )
    return MessageResponse(message="Verification email sent.")
