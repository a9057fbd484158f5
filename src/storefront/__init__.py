"""
Storefront Backend
GraphQL API for a small online shop: items, accounts and carts
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
