"""
Database Abstraction Interface

This module defines the two seams between the services and storage:

- DatabaseAdapter: engine configuration per database backend (SQLite,
  PostgreSQL, ...), so backends can be swapped without touching the rest
  of the codebase
- BindingStore: the key-value contract the binding services rely on,
  keyed by binding id
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import Pool

from shortlink.db.models import Binding


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    To add a new database backend:
    1. Create a new class inheriting from DatabaseAdapter
    2. Implement all abstract methods
    3. Update the factory function to return the new adapter
    """

    @abstractmethod
    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create and configure the async database engine.

        Args:
            database_url: Connection string for the database
            **kwargs: Additional engine configuration options

        Returns:
            Configured AsyncEngine instance
        """
        pass

    @abstractmethod
    def get_pool_class(self) -> Optional[type[Pool]]:
        """Connection pool class for this database type, or None for the default."""
        pass

    @abstractmethod
    def get_connect_args(self) -> dict[str, Any]:
        """Connection arguments specific to this database type."""
        pass

    @abstractmethod
    def get_engine_kwargs(self) -> dict[str, Any]:
        """Additional engine configuration specific to this database type."""
        pass

    @abstractmethod
    def get_dialect_name(self) -> str:
        """SQLAlchemy dialect name (e.g., 'sqlite', 'postgresql')."""
        pass


class BindingStore(ABC):
    """
    Persistence contract for bindings.

    Guarantees required by the services:
    - insert fails if the id already exists
    - upsert never fails because the id already exists
    - get reads and increments the access counter atomically
    - peek never mutates the binding
    - delete fails if the id does not exist

    Errors are raised to the caller as-is; the services never retry.
    """

    @abstractmethod
    async def insert(self, binding: Binding) -> Binding:
        """
        Store a new binding.

        Raises:
            DuplicateIDError: If the id already exists
        """
        pass

    @abstractmethod
    async def upsert(self, binding: Binding) -> Binding:
        """
        Create or replace a binding.

        When the id exists, its bound_at and counter are preserved while
        url, ttl, expire_on, max_requests and the fallback URLs are replaced.
        expire_on was computed from the bound_at of the update request, so
        on an updated binding expire_on need not equal the stored
        bound_at + ttl.
        """
        pass

    @abstractmethod
    async def get(self, identifier: str) -> Binding:
        """
        Read a binding and increment its access counter.

        Returns:
            The binding with the counter already incremented

        Raises:
            NotFoundError: If the id does not exist
        """
        pass

    @abstractmethod
    async def peek(self, identifier: str) -> Binding:
        """
        Read a binding without side effects.

        Raises:
            NotFoundError: If the id does not exist
        """
        pass

    @abstractmethod
    async def delete(self, identifier: str) -> None:
        """
        Remove a binding.

        Raises:
            NotFoundError: If the id does not exist
        """
        pass
