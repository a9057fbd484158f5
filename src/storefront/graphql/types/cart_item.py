"""
CartItem GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

if TYPE_CHECKING:
    from .item import Item


@strawberry.type
class CartItem:
    """Cart line for GraphQL API: one item and how many of it."""

    id: UUID
    user_id: UUID
    item_id: UUID
    quantity: int

    @strawberry.field
    async def item(self, info: strawberry.Info) -> Annotated["Item", strawberry.lazy(".item")] | None:
        """Get the item in this cart line."""
        from ..resolvers.cart import resolve_cart_item_item

        return await resolve_cart_item_item(self, info)
