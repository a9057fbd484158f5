"""
Shared access control logic for GraphQL resolvers
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

import strawberry
from starlette.responses import Response

from ..auth.context import AuthContext
from ..auth.middleware import get_auth_context
from ..auth.permissions import Permission, has_permission
from ..errors import AuthenticationRequired
from ..logging import get_logger

if TYPE_CHECKING:
    from ..dbmodels import CartItems, Items, Users

logger = get_logger(__name__)


@strawberry.enum
class ItemOrderBy(Enum):
    """Sort order for item listings"""

    CREATED_AT_DESC = "created_at_desc"
    CREATED_AT_ASC = "created_at_asc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    TITLE_ASC = "title_asc"


async def get_auth_context_from_info(info: strawberry.Info) -> AuthContext:
    """
    Extract the auth context from the GraphQL info object.

    The context getter normally resolves it once per request under the
    ``auth`` key; otherwise it is derived from the request cookie and cached.
    """
    context: dict[str, Any] = info.context
    auth_context = context.get("auth")
    if auth_context is None:
        auth_context = await get_auth_context(context.get("request"))
        context["auth"] = auth_context
    return auth_context


async def require_auth_context(info: strawberry.Info, message: str) -> AuthContext:
    """Return the auth context or raise AuthenticationRequired with ``message``."""
    auth_context = await get_auth_context_from_info(info)
    if not auth_context.is_authenticated:
        logger.info("Unauthenticated mutation attempt", reason=message)
        raise AuthenticationRequired(message)
    return auth_context


def get_response_from_info(info: strawberry.Info) -> Response:
    """Return the HTTP response the session cookie should be written to."""
    response = info.context.get("response")
    if response is None:
        raise RuntimeError("Response not found in GraphQL context")
    return response


def can_modify_item(item: "Items", user: "Users | None", permission: Permission) -> bool:
    """
    Check whether ``user`` may change ``item``.

    Allowed for the item's owner, or for holders of ADMIN or ``permission``.
    """
    if user is None:
        return False
    if item.user_id == user.id:
        return True
    return has_permission(user.permissions or [], [Permission.ADMIN, permission])


def owns_cart_item(cart_item: "CartItems", auth_context: AuthContext) -> bool:
    """Check whether the caller is the owner of a cart item."""
    return auth_context.is_authenticated and cart_item.user_id == auth_context.user_id
