"""
Root GraphQL mutation definitions
"""

from uuid import UUID

import strawberry

from ..types.cart_item import CartItem
from ..types.item import Item
from ..types.user import Permission, SuccessMessage, User


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Item mutations
    @strawberry.mutation(name="createItem")
    async def create_item(
        self,
        info: strawberry.Info,
        title: str,
        description: str,
        price: int,
        image: str | None = None,
        large_image: str | None = None,
    ) -> Item:
        """Create a new item owned by the current user."""
        from ..resolvers.item import create_item

        return await create_item(info, title, description, price, image, large_image)

    @strawberry.mutation(name="updateItem")
    async def update_item(
        self,
        info: strawberry.Info,
        id: UUID,
        title: str | None = None,
        description: str | None = None,
        price: int | None = None,
    ) -> Item:
        """Update an existing item."""
        from ..resolvers.item import update_item

        updates = {
            field: value
            for field, value in (("title", title), ("description", description), ("price", price))
            if value is not None
        }
        return await update_item(info, id, updates)

    @strawberry.mutation(name="deleteItem")
    async def delete_item(self, info: strawberry.Info, id: UUID) -> Item:
        """Delete an item."""
        from ..resolvers.item import delete_item

        return await delete_item(info, id)

    # Account mutations
    @strawberry.mutation
    async def signup(self, info: strawberry.Info, email: str, name: str, password: str) -> User:
        """Create an account and sign in."""
        from ..resolvers.auth import signup

        return await signup(info, email, name, password)

    @strawberry.mutation
    async def signin(self, info: strawberry.Info, email: str, password: str) -> User:
        """Sign in with email and password."""
        from ..resolvers.auth import signin

        return await signin(info, email, password)

    @strawberry.mutation
    async def signout(self, info: strawberry.Info) -> SuccessMessage:
        """Clear the session cookie."""
        from ..resolvers.auth import signout

        return await signout(info)

    @strawberry.mutation(name="requestReset")
    async def request_reset(self, info: strawberry.Info, email: str) -> SuccessMessage:
        """Email a password reset link."""
        from ..resolvers.auth import request_reset

        return await request_reset(info, email)

    @strawberry.mutation(name="resetPassword")
    async def reset_password(
        self, info: strawberry.Info, reset_token: str, password: str, confirm_password: str
    ) -> User:
        """Set a new password using a reset token."""
        from ..resolvers.auth import reset_password

        return await reset_password(info, reset_token, password, confirm_password)

    @strawberry.mutation(name="updatePermissions")
    async def update_permissions(
        self, info: strawberry.Info, user_id: UUID, permissions: list[Permission]
    ) -> User:
        """Overwrite a user's permissions."""
        from ..resolvers.user import update_permissions

        return await update_permissions(info, user_id, permissions)

    # Cart mutations
    @strawberry.mutation(name="addToCart")
    async def add_to_cart(self, info: strawberry.Info, id: UUID) -> CartItem:
        """Add one of an item to the current user's cart."""
        from ..resolvers.cart import add_to_cart

        return await add_to_cart(info, id)

    @strawberry.mutation(name="removeFromCart")
    async def remove_from_cart(self, info: strawberry.Info, id: UUID) -> CartItem:
        """Remove a line from the current user's cart."""
        from ..resolvers.cart import remove_from_cart

        return await remove_from_cart(info, id)
