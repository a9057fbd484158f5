"""Authentication context for request handling."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass
class AuthContext:
    """Runtime authentication context for a request."""

    user_id: UUID | None
    token: str | None

    @property
    def is_authenticated(self) -> bool:
        """Check if the request carries a verified session."""
        return self.user_id is not None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls(user_id=None, token=None)
