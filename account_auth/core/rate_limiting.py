"""Rate limiting configuration using slowapi.

Security: Slows credential stuffing on /login and /register and reset
spam on /forgot-password and /reset-password.

Requests whose bearer token has been resolved by the auth dependency are
keyed on the owning user (per-user limits behind shared IPs). Everything
else, including requests carrying an unverified Authorization header,
falls back to IP-based keying.

Usage in routers:
    from account_auth.core.rate_limiting import limiter

    @router.post("/login")
    @limiter.limit(settings.rate_limit_auth)
    async def login(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from account_auth.core.config import settings
from account_auth.core.responses import ErrorResponse

# Set on request.state by the bearer auth dependency once the token resolves
RATE_LIMIT_USER_ATTR = "rate_limit_user_id"


def _rate_limit_key_func(request: Request) -> str:
    """Get rate limit key from request.

    Key format:
    - Bearer token verified by deps.py: "user:{user_id}"
    - Otherwise: "unauth:{ip}"

    The Authorization header itself is never trusted here. A made-up token
    on an anonymous route is keyed on the client IP like any other request.

    Args:
        request: The incoming request.

    Returns:
        Rate limit key string.
    """
    user_id = getattr(request.state, RATE_LIMIT_USER_ATTR, None)
    if user_id:
        return f"user:{user_id}"

    return f"unauth:{get_remote_address(request)}"


# Global limiter instance
# Configured with in-memory storage (suitable for single-instance deployment)
# For multi-instance, configure Redis storage via RATELIMIT_STORAGE_URL
limiter = Limiter(
    key_func=_rate_limit_key_func,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Security: Returns 429 Too Many Requests with standard error envelope.

    Args:
        request: The incoming request.
        exc: The rate limit exception.

    Returns:
        JSONResponse with 429 status and retry-after header.
    """
    # Parse retry-after from exception detail (e.g., "10 per 1 minute")
    # Fallback to 60 seconds if parsing fails
    try:
        retry_after = str(exc.detail.split()[-1])
        int(retry_after.rstrip("s"))
    except (ValueError, AttributeError, IndexError):
        retry_after = "60"

    return JSONResponse(
        status_code=429,
        content=ErrorResponse.build(
            "RATE_LIMITED", f"Rate limit exceeded: {exc.detail}"
        ).model_dump(),
        headers={"Retry-After": retry_after},
    )
