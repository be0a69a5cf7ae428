"""
Database Session Management

This module handles async database connections using SQLAlchemy's async engine.
Uses the database adapter layer so the backend is chosen from DATABASE_URL.

Key Features:
- Async session management: Proper async context management
- Error handling: Automatic rollback on exceptions
- Table creation helper for development and tests (production uses alembic)
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from shortlink.core.setting import settings
from shortlink.db.sqlite_adapter import get_database_adapter
from shortlink.db import models  # noqa: F401  registers tables on SQLModel.metadata


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """Create an async session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,  # Prevents SQLAlchemy from expiring objects after commit
        autoflush=False,
    )


db_adapter = get_database_adapter(settings.DATABASE_URL)

engine = db_adapter.create_engine(
    settings.DATABASE_URL
)

async_session_maker = make_session_maker(engine)


async def create_tables(target: AsyncEngine = engine) -> None:
    """Create missing tables. Existing tables are left untouched."""
    async with target.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get database session.

    The binding store commits each operation itself; this dependency only
    guarantees the rollback on error and the close.

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(session: AsyncSession = Depends(get_session)):
            pass
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
