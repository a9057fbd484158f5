from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import func, select

from ...auth.permissions import Permission
from ...database.connection import get_async_session
from ...dbmodels import Items, Users
from ...errors import AuthorizationDenied, NotFound, ValidationFailed
from ...logging import get_logger
from ..access_control import (
    ItemOrderBy,
    can_modify_item,
    get_auth_context_from_info,
    require_auth_context,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..types.item import Item, ItemsConnection
    from ..types.user import User

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100

_ORDERING = {
    ItemOrderBy.CREATED_AT_DESC: Items.created_at.desc(),
    ItemOrderBy.CREATED_AT_ASC: Items.created_at.asc(),
    ItemOrderBy.PRICE_ASC: Items.price.asc(),
    ItemOrderBy.PRICE_DESC: Items.price.desc(),
    ItemOrderBy.TITLE_ASC: Items.title.asc(),
}


def item_to_graphql(item: Items) -> Item:
    """Convert an Items row to the GraphQL Item type."""
    from ..types.item import Item as ItemType

    return ItemType(
        id=item.id,
        user_id=item.user_id,
        title=item.title,
        description=item.description,
        price=item.price,
        image=item.image,
        large_image=item.large_image,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _check_price(price: int) -> None:
    if price < 0:
        raise ValidationFailed("Price must not be negative", price=price)


async def _load_item(session: AsyncSession, item_id: UUID) -> Items:
    item = await session.get(Items, item_id)
    if item is None:
        logger.info("Item not found", item_id=str(item_id))
        raise NotFound(f"No item found for id {item_id}", id=str(item_id))
    return item


async def _authorize_item_change(
    session: AsyncSession, item: Items, caller_id: UUID | None, permission: Permission
) -> None:
    caller = await session.get(Users, caller_id) if caller_id else None
    if not can_modify_item(item, caller, permission):
        logger.info(
            "Item change denied",
            item_id=str(item.id),
            caller_id=str(caller_id) if caller_id else None,
            permission=permission.value,
        )
        raise AuthorizationDenied("You don't have permission to do that!")


# Query resolvers
async def resolve_item_by_id(info: strawberry.Info, id: UUID) -> Item | None:
    async with get_async_session() as session:
        item = await session.get(Items, id)
        return item_to_graphql(item) if item else None


async def resolve_items(
    info: strawberry.Info,
    skip: int,
    first: int | None,
    order_by: ItemOrderBy,
) -> list[Item]:
    """Resolve a page of items."""
    limit = min(first, MAX_PAGE_SIZE) if first is not None else MAX_PAGE_SIZE

    async with get_async_session() as session:
        stmt = (
            select(Items)
            .order_by(_ORDERING[order_by], Items.id)
            .offset(max(skip, 0))
            .limit(max(limit, 0))
        )
        result = await session.execute(stmt)
        return [item_to_graphql(item) for item in result.scalars().all()]


async def resolve_items_connection(info: strawberry.Info) -> ItemsConnection:
    from ..types.item import ItemsConnection as ItemsConnectionType

    async with get_async_session() as session:
        count = await session.scalar(select(func.count()).select_from(Items))
        return ItemsConnectionType(count=count or 0)


# Field resolvers
async def resolve_item_user(item: Item, info: strawberry.Info) -> User | None:
    from .user import user_to_graphql

    async with get_async_session() as session:
        user = await session.get(Users, item.user_id)
        return user_to_graphql(user) if user else None


# Mutation resolvers
async def create_item(
    info: strawberry.Info,
    title: str,
    description: str,
    price: int,
    image: str | None = None,
    large_image: str | None = None,
) -> Item:
    """
    Create a new item.

    The authenticated user becomes the item's owner.
    """
    auth_context = await require_auth_context(info, "You must be logged in to post an item!")
    _check_price(price)

    async with get_async_session() as session:
        new_item = Items(
            user_id=auth_context.user_id,
            title=title,
            description=description,
            price=price,
            image=image,
            large_image=large_image,
        )

        session.add(new_item)
        await session.flush()
        await session.refresh(new_item)

        logger.info(
            "Item created",
            item_id=str(new_item.id),
            user_id=str(auth_context.user_id),
            title=new_item.title,
        )

        return item_to_graphql(new_item)


async def update_item(info: strawberry.Info, id: UUID, updates: dict[str, object]) -> Item:
    """
    Update an existing item.

    ``updates`` holds only the fields the caller actually supplied. Only the
    owner, or a holder of ADMIN or ITEMUPDATE, may update an item.
    """
    if "price" in updates:
        _check_price(updates["price"])  # type: ignore[arg-type]
    auth_context = await get_auth_context_from_info(info)

    async with get_async_session() as session:
        item = await _load_item(session, id)
        await _authorize_item_change(session, item, auth_context.user_id, Permission.ITEMUPDATE)

        for field, value in updates.items():
            setattr(item, field, value)

        await session.flush()
        await session.refresh(item)

        logger.info(
            "Item updated",
            item_id=str(item.id),
            user_id=str(auth_context.user_id),
            updated_fields=sorted(updates),
        )

        return item_to_graphql(item)


async def delete_item(info: strawberry.Info, id: UUID) -> Item:
    """
    Delete an item and return it.

    Only the owner, or a holder of ADMIN or ITEMDELETE, may delete an item.
    """
    auth_context = await get_auth_context_from_info(info)

    async with get_async_session() as session:
        item = await _load_item(session, id)
        await _authorize_item_change(session, item, auth_context.user_id, Permission.ITEMDELETE)

        deleted = item_to_graphql(item)
        await session.delete(item)

        logger.info("Item deleted", item_id=str(id), user_id=str(auth_context.user_id))

        return deleted
