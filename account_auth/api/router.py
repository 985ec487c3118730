"""API router aggregator.

All endpoint routers are included here and mounted by main.py under
settings.api_prefix.
"""

from fastapi import APIRouter

from account_auth.api import auth, email_verification, password_reset

router = APIRouter()

# =============================================================================
# Accounts and sessions
# =============================================================================

router.include_router(auth.router, tags=["auth"])

# =============================================================================
# Email verification
# =============================================================================

router.include_router(email_verification.router, tags=["email-verification"])

# =============================================================================
# Password reset
# =============================================================================

router.include_router(password_reset.router, tags=["password-reset"])
