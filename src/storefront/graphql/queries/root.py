"""
Root GraphQL query definitions
"""

from uuid import UUID

import strawberry

from ..access_control import ItemOrderBy
from ..types.item import Item, ItemsConnection
from ..types.user import User


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current authenticated user."""
        from ..resolvers.user import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def users(self, info: strawberry.Info) -> list[User]:
        """List all users. Requires ADMIN or PERMISSIONUPDATE."""
        from ..resolvers.user import resolve_users

        return await resolve_users(info)

    @strawberry.field
    async def item(self, info: strawberry.Info, id: UUID) -> Item | None:
        """Get an item by ID."""
        from ..resolvers.item import resolve_item_by_id

        return await resolve_item_by_id(info, id)

    @strawberry.field
    async def items(
        self,
        info: strawberry.Info,
        skip: int | None = 0,
        first: int | None = None,
        order_by: ItemOrderBy | None = None,
    ) -> list[Item]:
        """Get a page of items, newest first by default."""
        from ..resolvers.item import resolve_items

        return await resolve_items(
            info, skip or 0, first, order_by or ItemOrderBy.CREATED_AT_DESC
        )

    @strawberry.field(name="itemsConnection")
    async def items_connection(self, info: strawberry.Info) -> ItemsConnection:
        """Get aggregate information about all items."""
        from ..resolvers.item import resolve_items_connection

        return await resolve_items_connection(info)
