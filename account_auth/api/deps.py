"""Shared dependencies for API endpoints.

Bearer authentication: the Authorization header is resolved through the
token registry on every request. No session state lives in the process.

WHY DEPENDENCY INJECTION:
- Consistent auth across all endpoints
- Storage and database are swapped in tests via dependency_overrides
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from account_auth.core.database import get_db
from account_auth.core.errors import UnauthorizedError
from account_auth.core.rate_limiting import RATE_LIMIT_USER_ATTR
from account_auth.core.storage import PublicStorage, get_storage
from account_auth.models import User
from account_auth.services import access_tokens
from account_auth.services.access_tokens import AuthenticatedSession

# auto_error=False: a missing header must produce our own uniform 401,
# not FastAPI's 403.
_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_session(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)
    ],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthenticatedSession:
    """Resolve the bearer token on the request.

    Security: missing header, wrong scheme, unknown token and deleted user
    all raise the same UnauthorizedError.

    Args:
        request: The incoming request. The resolved user id is recorded
            on its state for per-user rate limiting.
        credentials: Parsed Authorization header, if any (injected).
        db: Database session (injected).

    Returns:
        The authenticated user and the token record used.

    Raises:
        UnauthorizedError: 401 for any auth failure.
    """
    presented = credentials.credentials if credentials else None
    session = await access_tokens.authenticate(db, presented)
    if session is None:
        raise UnauthorizedError()
    setattr(request.state, RATE_LIMIT_USER_ATTR, str(session.user.id))
    return session


async def get_current_user(
    session: Annotated[AuthenticatedSession, Depends(get_current_session)],
) -> User:
    """Get the User behind the request's bearer token."""
    return session.user


# Reusable type aliases for dependency injection
CurrentSession = Annotated[AuthenticatedSession, Depends(get_current_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
Storage = Annotated[PublicStorage, Depends(get_storage)]
