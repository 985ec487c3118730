"""Account endpoints: registration, login, logout, profile.

Endpoints:
- POST /register: create account, issue bearer token, send verification mail
- POST /login: verify credentials, issue bearer token
- POST /logout: revoke the token used for this request
- GET /user: current user
- POST /upload-profile-image: replace the profile image

Security considerations:
- login: bcrypt comparison runs against DUMMY_HASH when the email is
  unknown, and both failure cases share one message
- register: duplicate email surfaces as a field error, never a 500
- logout: revokes only the presenting token; other sessions stay live
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, BackgroundTasks, File, Request, UploadFile
from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from account_auth.api.deps import CurrentSession, CurrentUser, DbSession, Storage
from account_auth.core import events
from account_auth.core.auth import (
    hash_password,
    validate_password_strength,
    verify_password,
)
from account_auth.core.clock import utcnow
from account_auth.core.config import settings
from account_auth.core.email import send_verification_email
from account_auth.core.errors import (
    ConflictError,
    ProcessingFailureError,
    ValidationError,
    field_error,
)
from account_auth.core.file_validation import (
    read_file_with_size_limit,
    validate_image_content,
)
from account_auth.core.images import normalize_profile_image
from account_auth.core.rate_limiting import limiter
from account_auth.core.responses import (
    MessageResponse,
    TokenResponse,
    UserEnvelope,
    UserMessageResponse,
)
from account_auth.repositories.user_repository import UserRepository
from account_auth.schemas.auth import LoginRequest, RegisterRequest
from account_auth.schemas.user import UserResponse
from account_auth.services import access_tokens
from account_auth.services.email_verification import verification_url

logger = structlog.get_logger()

router = APIRouter()

_INVALID_CREDENTIALS_MSG = "The provided credentials are incorrect."

_PROFILE_IMAGE_DIR = "profile-images"


# ===================================================================
# POST /register
# ===================================================================


@router.post("/register", status_code=201)
@limiter.limit(settings.rate_limit_auth)
async def register(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: DbSession,
) -> TokenResponse:
    """Register a new user and sign them in.

    Creates the account with a bcrypt password hash, issues the first
    bearer token and queues the verification email.
    """
    validate_password_strength(body.password, body.password_confirmation)

    try:
        user = await UserRepository.create(
            db,
            name=body.name,
            email=body.email,
            password_hash=hash_password(body.password),
            contact_number=body.contact_number,
        )
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(
            code="EMAIL_ALREADY_EXISTS",
            message="The email has already been taken.",
            details=field_error("email", "EMAIL_ALREADY_EXISTS"),
        ) from exc

    issued = await access_tokens.issue_token(db, user)
    await db.commit()

    background_tasks.add_task(
        send_verification_email,
        to_email=user.email,
        name=user.name,
        url=verification_url(user),
    )
    events.registered(user.id)

    return TokenResponse(
        user=UserResponse.from_user(user),
        access_token=issued.plain_text,
        message="Registration successful. Please verify your email address.",
    )


# ===================================================================
# POST /login
# ===================================================================


@router.post("/login")
@limiter.limit(settings.rate_limit_auth)
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    db: DbSession,
) -> TokenResponse:
    """Verify email + password and issue a bearer token.

    Unknown email and wrong password are indistinguishable in both
    response body and timing.
    """
    user = await UserRepository.get_by_email(db, body.email)

    if not verify_password(body.password, user.password_hash if user else None):
        raise ValidationError(
            _INVALID_CREDENTIALS_MSG,
            details=field_error("email", "INVALID_CREDENTIALS"),
        )

    # verify_password() only returns True for a real hash, so user is set
    assert user is not None  # nosec B101
    issued = await access_tokens.issue_token(db, user)
    await db.commit()

    return TokenResponse(
        user=UserResponse.from_user(user),
        access_token=issued.plain_text,
    )


# ===================================================================
# POST /logout
# ===================================================================


@router.post("/logout")
async def logout(session: CurrentSession, db: DbSession) -> MessageResponse:
    """Revoke the bearer token that authenticated this request."""
    await access_tokens.revoke(db, session.token)
    await db.commit()
    return MessageResponse(message="Successfully logged out")


# ===================================================================
# GET /user
# ===================================================================


@router.get("/user")
async def current_user(user: CurrentUser) -> UserEnvelope:
    """Return the authenticated user."""
    return UserEnvelope(user=UserResponse.from_user(user))


# ===================================================================
# POST /upload-profile-image
# ===================================================================


@router.post("/upload-profile-image")
async def upload_profile_image(
    image: Annotated[UploadFile, File()],
    user: CurrentUser,
    db: DbSession,
    storage: Storage,
) -> UserMessageResponse:
    """Replace the authenticated user's profile image.

    The upload is type-checked by magic bytes, centre-cropped to a square,
    re-encoded as JPEG and stored. The previous image is deleted only
    after the user record pointing at the new one is committed.
    """
    content = await read_file_with_size_limit(image)
    validate_image_content(content, image.filename)
    encoded = await run_in_threadpool(normalize_profile_image, content)

    key = f"{_PROFILE_IMAGE_DIR}/{user.id}_{int(utcnow().timestamp())}.jpg"
    previous = user.profile_image
    try:
        await run_in_threadpool(storage.put, key, encoded)
    except OSError as exc:
        logger.warning("Profile image storage failed", user_id=str(user.id))
        raise ProcessingFailureError() from exc

    updated = await UserRepository.update(db, user.id, profile_image=key)
    await db.commit()

    # The old file goes only once the record points at the new one
    if previous and previous != key:
        try:
            await run_in_threadpool(storage.delete, previous)
        except OSError:
            logger.warning(
                "Previous profile image not removed",
                user_id=str(user.id),
                key=previous,
            )

    return UserMessageResponse(
        user=UserResponse.from_user(updated or user),
        message="Profile image updated successfully.",
    )
