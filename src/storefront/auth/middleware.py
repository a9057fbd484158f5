"""Resolve the caller's identity from the session cookie."""

from __future__ import annotations

from starlette.requests import Request

from ..logging import bind_user, get_logger
from .context import AuthContext
from .session import read_session_token
from .tokens import AuthenticationError, get_token_issuer

logger = get_logger(__name__)


async def get_auth_context(request: Request | None) -> AuthContext:
    """
    Build the AuthContext for a request.

    Reads the session cookie and verifies its signature and expiry. A missing
    or invalid token yields an anonymous context rather than an error, so
    public queries keep working and mutations decide for themselves whether a
    caller is required.
    """
    if request is None:
        return AuthContext.anonymous()

    token = read_session_token(request)
    if not token:
        return AuthContext.anonymous()

    try:
        user_id = await get_token_issuer().verify_token(token)
    except AuthenticationError as e:
        logger.info("Ignoring invalid session cookie", error=str(e))
        return AuthContext.anonymous()

    bind_user(user_id)
    return AuthContext(user_id=user_id, token=token)
