"""Session cookie handling at the HTTP boundary."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from ..config import get_session_max_age_seconds, settings


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session token to ``response`` as an HTTP-only cookie."""
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=get_session_max_age_seconds(),
        httponly=True,
        samesite="lax",
        secure=settings.environment.lower() in ("production", "prod"),
    )


def clear_session_cookie(response: Response) -> None:
    """Instruct the client to drop the session cookie."""
    response.delete_cookie(settings.session_cookie_name, httponly=True, samesite="lax")


def read_session_token(request: Request) -> str | None:
    """Return the raw session token from the request cookies, if any."""
    return request.cookies.get(settings.session_cookie_name) or None
