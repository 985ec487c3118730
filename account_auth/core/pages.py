"""HTML status page for verification links opened in a browser.

Rendered from ``account_auth/templates`` through Jinja2Templates, which
autoescapes every interpolated value.
"""

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import HTMLResponse

from account_auth.core.config import settings

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=_TEMPLATE_DIR)

_TITLES = {
    "success": "Email Verified Successfully",
    "already_verified": "Email Already Verified",
    "error": "Verification Failed",
}


def verification_page(
    request: Request,
    status: str,
    *,
    name: str | None = None,
    message: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render the page for one verification status.

    Args:
        request: The incoming request.
        status: "success", "already_verified" or "error".
        name: Display name of the user, shown on success.
        message: Explanation shown on error.
        status_code: HTTP status of the response.

    Returns:
        Rendered template response.
    """
    page_status = status if status in _TITLES else "error"
    return templates.TemplateResponse(
        request,
        "email_verification.html",
        {
            "status": page_status,
            "title": _TITLES[page_status],
            "name": name,
            "message": message,
            "frontend_url": settings.frontend_url,
        },
        status_code=status_code,
    )
