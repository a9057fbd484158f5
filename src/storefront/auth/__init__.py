"""Authentication and authorization for Storefront."""

from .context import AuthContext
from .middleware import get_auth_context
from .passwords import hash_password, verify_password
from .permissions import Permission, has_permission, require_permission
from .session import clear_session_cookie, set_session_cookie
from .tokens import SessionTokenIssuer, get_token_issuer

__all__ = [
    "AuthContext",
    "Permission",
    "SessionTokenIssuer",
    "clear_session_cookie",
    "get_auth_context",
    "get_token_issuer",
    "has_permission",
    "hash_password",
    "require_permission",
    "set_session_cookie",
    "verify_password",
]
