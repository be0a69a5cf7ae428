"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

Key characteristics:
- File-based (single .db file), or in-memory for tests
- Single writer at a time (file locking), which also serializes the
  counter increment in the binding store
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, Pool, StaticPool

from shortlink.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    Args:
        in_memory: Share one connection between all sessions. An in-memory
            database only lives as long as its connection.
    """

    def __init__(self, in_memory: bool = False):
        self.in_memory = in_memory

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
            **kwargs: Additional engine options (merged with SQLite defaults)

        Returns:
            Configured AsyncEngine for SQLite
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        return create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    def get_pool_class(self) -> Optional[type[Pool]]:
        """
        NullPool for file databases (no benefit from pooling), StaticPool
        for in-memory databases (one connection must outlive the sessions).
        """
        return StaticPool if self.in_memory else NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"


def get_database_adapter(database_url: str = "") -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Returns SQLiteAdapter by default. To switch to PostgreSQL, create a
    PostgreSQLAdapter class and update this function.

    Args:
        database_url: Connection string the engine will be created for

    Returns:
        DatabaseAdapter instance
    """
    return SQLiteAdapter(in_memory=":memory:" in database_url)
