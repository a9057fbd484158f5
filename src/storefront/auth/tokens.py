"""Signed session tokens (stateless JWTs embedding the user id)."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt.exceptions import InvalidTokenError

from ..config import settings
from ..logging import get_logger

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Raised when a session token cannot be verified."""

    pass


class SessionTokenIssuer:
    """Issues and verifies the JWTs stored in the session cookie.

    Tokens carry a ``userId`` claim. They are not recorded server-side, so a
    token stays valid until it expires or the signing secret is rotated.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        token_expiry_days: int = 365,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_expiry_days = token_expiry_days

    async def issue_token(self, user_id: UUID) -> str:
        """Issue a new session token for ``user_id``."""
        now = datetime.now(UTC)

        payload = {
            "userId": str(user_id),
            "iat": now,
            "exp": now + timedelta(days=self.token_expiry_days),
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    async def verify_token(self, token: str) -> UUID:
        """Verify a session token and return the user id it embeds."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": True, "verify_iat": True},
            )

            user_id = payload.get("userId")
            if not user_id:
                raise AuthenticationError("Missing 'userId' claim in token")

            return UUID(str(user_id))

        except AuthenticationError:
            raise
        except InvalidTokenError as e:
            logger.warning("Session token validation failed", error=str(e))
            raise AuthenticationError("Invalid token") from e
        except ValueError as e:
            logger.warning("Session token carries a malformed user id", error=str(e))
            raise AuthenticationError("Invalid token") from e


def get_token_issuer() -> SessionTokenIssuer:
    """Create a token issuer from the current settings."""
    return SessionTokenIssuer(
        secret_key=settings.app_secret,
        algorithm=settings.jwt_algorithm,
        token_expiry_days=settings.session_max_age_days,
    )
