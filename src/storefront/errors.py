"""
Error taxonomy for Storefront resolvers.

Every error carries a machine-readable ``code``. graphql-core copies the
``extensions`` attribute of the original exception onto the GraphQL error it
builds, so clients see ``errors[].extensions.code`` next to the message.
"""

from __future__ import annotations

from typing import Any


class StorefrontError(Exception):
    """Base class for errors surfaced to GraphQL clients."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def extensions(self) -> dict[str, Any]:
        return {"code": self.code, **self.details}


class AuthenticationRequired(StorefrontError):
    """Raised when a mutation needs a signed-in caller and there is none."""

    code = "UNAUTHENTICATED"


class AuthorizationDenied(StorefrontError):
    """Raised when the caller lacks a permission or does not own the record."""

    code = "FORBIDDEN"


class NotFound(StorefrontError):
    """Raised when a referenced record does not exist."""

    code = "NOT_FOUND"


class ValidationFailed(StorefrontError):
    """Raised when arguments are inconsistent or violate a constraint."""

    code = "BAD_USER_INPUT"


class InvalidCredentials(StorefrontError):
    """Raised when a password does not match the stored hash."""

    code = "INVALID_CREDENTIALS"


class InvalidOrExpiredToken(StorefrontError):
    """Raised when a password-reset token is unknown or past its expiry."""

    code = "INVALID_RESET_TOKEN"
