"""
Database module for Storefront backend
"""

from .connection import create_all_tables, get_async_engine, get_async_session, init_database

__all__ = ["create_all_tables", "get_async_engine", "get_async_session", "init_database"]
