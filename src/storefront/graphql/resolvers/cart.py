from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import strawberry
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from ...database.connection import get_async_session
from ...dbmodels import CartItems, Items
from ...errors import AuthorizationDenied, NotFound
from ...logging import get_logger
from ..access_control import owns_cart_item, require_auth_context
from .item import item_to_graphql

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..types.cart_item import CartItem
    from ..types.item import Item

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def cart_item_to_graphql(cart_item: CartItems) -> CartItem:
    """Convert a CartItems row to the GraphQL CartItem type."""
    from ..types.cart_item import CartItem as CartItemType

    return CartItemType(
        id=cart_item.id,
        user_id=cart_item.user_id,
        item_id=cart_item.item_id,
        quantity=cart_item.quantity,
    )


async def _increment_cart_line(session: AsyncSession, user_id: UUID, item_id: UUID) -> None:
    """
    Insert a cart line with quantity 1, or bump the existing line by one.

    Runs as a single INSERT .. ON CONFLICT statement against the
    (user_id, item_id) unique constraint, so concurrent adds never create a
    second line for the same pair.
    """
    dialect = session.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Cart upsert is not supported on {dialect}")

    stmt = insert(CartItems).values(id=uuid4(), user_id=user_id, item_id=item_id, quantity=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[CartItems.user_id, CartItems.item_id],
        set_={"quantity": CartItems.quantity + 1},
    )
    await session.execute(stmt)


# Field resolvers
async def resolve_cart_item_item(cart_item: CartItem, info: strawberry.Info) -> Item | None:
    async with get_async_session() as session:
        item = await session.get(Items, cart_item.item_id)
        return item_to_graphql(item) if item else None


# Mutation resolvers
async def add_to_cart(info: strawberry.Info, id: UUID) -> CartItem:
    """
    Add one of an item to the caller's cart.

    Creates the cart line on first add; later adds increment its quantity.
    """
    auth_context = await require_auth_context(info, "You must be signed in to add items!")
    user_id = auth_context.user_id

    async with get_async_session() as session:
        item = await session.get(Items, id)
        if item is None:
            raise NotFound(f"No item found for id {id}", id=str(id))

        await _increment_cart_line(session, user_id, id)

        stmt = select(CartItems).where(CartItems.user_id == user_id, CartItems.item_id == id)
        # The upsert bypassed the identity map, so reload rather than reuse a stale row
        result = await session.execute(stmt.execution_options(populate_existing=True))
        cart_item = result.scalar_one()

        logger.info(
            "Cart updated",
            user_id=str(user_id),
            item_id=str(id),
            quantity=cart_item.quantity,
        )

        return cart_item_to_graphql(cart_item)


async def remove_from_cart(info: strawberry.Info, id: UUID) -> CartItem:
    """
    Remove a whole cart line and return it.

    Only the cart line's owner may remove it.
    """
    auth_context = await require_auth_context(info, "You must be signed in to remove items!")

    async with get_async_session() as session:
        cart_item = await session.get(CartItems, id)
        if cart_item is None:
            raise NotFound("No Cart Item Found!", id=str(id))
        if not owns_cart_item(cart_item, auth_context):
            logger.info(
                "Cart removal denied",
                cart_item_id=str(id),
                caller_id=str(auth_context.user_id),
            )
            raise AuthorizationDenied("You don't own this cart item!")

        removed = cart_item_to_graphql(cart_item)
        await session.delete(cart_item)

        logger.info("Cart item removed", cart_item_id=str(id), user_id=str(auth_context.user_id))

        return removed
