"""
SQL Binding Store

BindingStore implementation on top of an async SQLModel session.

Design Decisions:
- Each operation commits its own transaction (the store is the unit of
  consistency, not the request)
- get increments the counter with a database-level UPDATE before reading,
  so concurrent reads never lose an increment
- Integrity violations on insert are reported as DuplicateIDError; other
  unexpected SQLAlchemy failures, and values the driver cannot bind
  (OverflowError), roll back and are wrapped in DatabaseError
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.core.exceptions import DatabaseError, DuplicateIDError, NotFoundError
from shortlink.db.interface import BindingStore
from shortlink.db.models import Binding

logger = logging.getLogger(__name__)


class SQLBindingStore(BindingStore):
    """Binding store backed by the `bindings` table."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the store with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session

    async def insert(self, binding: Binding) -> Binding:
        try:
            self.session.add(binding)
            await self.session.flush()
            await self.session.commit()
            return binding
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateIDError(binding.id)
        except (SQLAlchemyError, OverflowError) as e:
            await self.session.rollback()
            logger.error(f"Failed to insert binding {binding.id}: {e}", exc_info=True)
            raise DatabaseError(f"Failed to insert binding: {e}", original_error=e)

    async def upsert(self, binding: Binding, retry: bool = True) -> Binding:
        try:
            existing = await self.session.get(Binding, binding.id)
            if existing is None:
                self.session.add(binding)
                stored = binding
            else:
                # bound_at and counter stay; expire_on is the one computed for this request
                existing.url = binding.url
                existing.ttl = binding.ttl
                existing.expire_on = binding.expire_on
                existing.max_requests = binding.max_requests
                existing.expired_url = binding.expired_url
                existing.exhausted_url = binding.exhausted_url
                stored = existing
            await self.session.flush()
            await self.session.commit()
            return stored
        except IntegrityError as e:
            await self.session.rollback()
            if not retry:
                raise DatabaseError(f"Failed to upsert binding: {e}", original_error=e)
            # Race condition: another writer created the same id first
            logger.warning(f"Concurrent create of binding {binding.id}, retrying as update")
            return await self.upsert(binding, retry=False)
        except (SQLAlchemyError, OverflowError) as e:
            await self.session.rollback()
            logger.error(f"Failed to upsert binding {binding.id}: {e}", exc_info=True)
            raise DatabaseError(f"Failed to upsert binding: {e}", original_error=e)

    async def get(self, identifier: str) -> Binding:
        try:
            statement = (
                update(Binding)
                .where(Binding.id == identifier)
                .values(counter=Binding.counter + 1)
            )
            result = await self.session.execute(statement)
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFoundError(identifier)

            binding = await self._select(identifier, populate_existing=True)
            await self.session.commit()
            return binding
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to read binding {identifier}: {e}", exc_info=True)
            raise DatabaseError(f"Failed to read binding: {e}", original_error=e)

    async def peek(self, identifier: str) -> Binding:
        try:
            binding = await self._select(identifier)
        except SQLAlchemyError as e:
            logger.error(f"Failed to peek binding {identifier}: {e}", exc_info=True)
            raise DatabaseError(f"Failed to read binding: {e}", original_error=e)
        if binding is None:
            raise NotFoundError(identifier)
        return binding

    async def delete(self, identifier: str) -> None:
        try:
            statement = delete(Binding).where(Binding.id == identifier)
            result = await self.session.execute(statement)
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFoundError(identifier)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to delete binding {identifier}: {e}", exc_info=True)
            raise DatabaseError(f"Failed to delete binding: {e}", original_error=e)

    async def _select(self, identifier: str, populate_existing: bool = False):
        statement = select(Binding).where(Binding.id == identifier)
        if populate_existing:
            # the identity map may hold a copy read before the increment
            statement = statement.execution_options(populate_existing=True)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()
