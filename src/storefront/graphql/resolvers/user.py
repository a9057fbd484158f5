from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import select

from ...auth.permissions import Permission, require_permission
from ...database.connection import get_async_session
from ...dbmodels import CartItems, Users
from ...errors import NotFound
from ...logging import get_logger
from ..access_control import get_auth_context_from_info, require_auth_context

if TYPE_CHECKING:
    from ..types.cart_item import CartItem
    from ..types.user import User

logger = get_logger(__name__)

# Either capability is enough to manage other users
USER_ADMIN_PERMISSIONS = [Permission.ADMIN, Permission.PERMISSIONUPDATE]


def user_to_graphql(user: Users) -> User:
    """Convert a Users row to the GraphQL User type."""
    from ..types.user import User as UserType

    return UserType(
        id=user.id,
        name=user.name,
        email=user.email,
        permissions=[Permission(p) for p in user.permissions or []],
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


# Query resolvers
async def resolve_current_user(info: strawberry.Info) -> User | None:
    auth_context = await get_auth_context_from_info(info)
    if not auth_context.is_authenticated:
        return None

    async with get_async_session() as session:
        user = await session.get(Users, auth_context.user_id)
        return user_to_graphql(user) if user else None


async def resolve_users(info: strawberry.Info) -> list[User]:
    """List every user. Requires ADMIN or PERMISSIONUPDATE."""
    auth_context = await require_auth_context(info, "You must be logged in!")

    async with get_async_session() as session:
        caller = await session.get(Users, auth_context.user_id)
        if caller is None:
            raise NotFound("Your account no longer exists")
        require_permission(caller.permissions or [], USER_ADMIN_PERMISSIONS)

        result = await session.execute(select(Users).order_by(Users.email))
        return [user_to_graphql(user) for user in result.scalars().all()]


# Field resolvers
async def resolve_user_cart(user: User, info: strawberry.Info) -> list[CartItem]:
    from .cart import cart_item_to_graphql

    auth_context = await get_auth_context_from_info(info)
    if auth_context.user_id != user.id:
        return []

    async with get_async_session() as session:
        stmt = (
            select(CartItems)
            .where(CartItems.user_id == user.id)
            .order_by(CartItems.created_at, CartItems.id)
        )
        result = await session.execute(stmt)
        return [cart_item_to_graphql(cart_item) for cart_item in result.scalars().all()]


# Mutation resolvers
async def update_permissions(
    info: strawberry.Info, user_id: UUID, permissions: list[Permission]
) -> User:
    """
    Overwrite a user's permission set.

    The caller must hold ADMIN or PERMISSIONUPDATE.
    """
    auth_context = await require_auth_context(info, "You must be logged in!")

    async with get_async_session() as session:
        caller = await session.get(Users, auth_context.user_id)
        if caller is None:
            raise NotFound("Your account no longer exists")
        require_permission(caller.permissions or [], USER_ADMIN_PERMISSIONS)

        target = await session.get(Users, user_id)
        if target is None:
            raise NotFound(f"No user found for id {user_id}", id=str(user_id))

        # Deduplicate while keeping the caller's order
        target.permissions = list(dict.fromkeys(p.value for p in permissions))

        await session.flush()
        await session.refresh(target)

        logger.info(
            "Permissions updated",
            target_user_id=str(target.id),
            permissions=target.permissions,
            updated_by=str(caller.id),
        )

        return user_to_graphql(target)
