"""Permission labels and permission checks."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from ..errors import AuthorizationDenied


class Permission(Enum):
    """Capabilities a user can hold."""

    ADMIN = "ADMIN"
    USER = "USER"
    ITEMCREATE = "ITEMCREATE"
    ITEMUPDATE = "ITEMUPDATE"
    ITEMDELETE = "ITEMDELETE"
    PERMISSIONUPDATE = "PERMISSIONUPDATE"


DEFAULT_PERMISSIONS: list[str] = [Permission.USER.value]


def _labels(permissions: Iterable[Permission | str]) -> list[str]:
    return [p.value if isinstance(p, Permission) else str(p) for p in permissions]


def has_permission(held: Iterable[Permission | str], needed: Iterable[Permission | str]) -> bool:
    """True when ``held`` contains at least one of ``needed``."""
    held_labels = set(_labels(held))
    return any(label in held_labels for label in _labels(needed))


def require_permission(
    held: Iterable[Permission | str], needed: Iterable[Permission | str]
) -> None:
    """Raise AuthorizationDenied unless ``held`` contains one of ``needed``."""
    held_labels = _labels(held)
    needed_labels = _labels(needed)
    if not has_permission(held_labels, needed_labels):
        raise AuthorizationDenied(
            "You do not have sufficient permissions. "
            f"Needed one of: {', '.join(needed_labels)}. "
            f"You have: {', '.join(held_labels) or 'none'}.",
            needed=needed_labels,
        )


def parse_permissions(values: Iterable[str]) -> list[Permission]:
    """Parse permission labels, raising ValueError on an unknown label."""
    return [Permission(value.upper()) for value in values]
