"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: engine configuration per backend
- BindingStore interface: the key-value contract used by the services
- SQLBindingStore: the SQL implementation of BindingStore
- Session management: Database session creation and management
"""

from shortlink.db.interface import BindingStore, DatabaseAdapter
from shortlink.db.repository import SQLBindingStore
from shortlink.db.session import get_session, async_session_maker, engine

__all__ = [
    "BindingStore",
    "DatabaseAdapter",
    "SQLBindingStore",
    "get_session",
    "async_session_maker",
    "engine",
]
