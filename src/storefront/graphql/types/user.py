"""
User GraphQL type definitions
"""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

from ...auth.permissions import Permission as PermissionEnum

if TYPE_CHECKING:
    from .cart_item import CartItem

Permission = strawberry.enum(PermissionEnum, name="Permission", description="User capability")


@strawberry.type
class User:
    """User type for GraphQL API.

    Password hashes and reset tokens are never exposed.
    """

    id: UUID
    name: str
    email: str
    permissions: list[Permission]
    created_at: datetime
    updated_at: datetime

    @strawberry.field
    async def cart(
        self, info: strawberry.Info
    ) -> list[Annotated["CartItem", strawberry.lazy(".cart_item")]]:
        """Get this user's cart (only visible to the user themself)."""
        from ..resolvers.user import resolve_user_cart

        return await resolve_user_cart(self, info)


@strawberry.type
class SuccessMessage:
    """Plain acknowledgement returned by side-effect mutations."""

    message: str
