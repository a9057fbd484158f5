"""
Item GraphQL type definitions
"""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

if TYPE_CHECKING:
    from .user import User


@strawberry.type
class Item:
    """Item type for GraphQL API."""

    id: UUID
    user_id: UUID
    title: str
    description: str
    price: int
    image: str | None
    large_image: str | None
    created_at: datetime
    updated_at: datetime

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Annotated["User", strawberry.lazy(".user")] | None:
        """Get the user who created this item."""
        from ..resolvers.item import resolve_item_user

        return await resolve_item_user(self, info)


@strawberry.type
class ItemsConnection:
    """Aggregate information about the item listing."""

    count: int
