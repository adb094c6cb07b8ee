from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from newsletter.config import DATABASE_URL
from newsletter.errors import StorageError

from .models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, _record):  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine_for(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine, enabling foreign keys for SQLite URLs."""
    engine = create_async_engine(url, echo=False, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_foreign_keys(engine)
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


engine = create_engine_for(DATABASE_URL)

AsyncSessionLocal = create_sessionmaker(engine)


async def init_models(target: Optional[AsyncEngine] = None) -> None:
    """Create tables if they do not exist (local development and tests)."""
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI-style dependency that yields an AsyncSession.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def storage_errors(session: AsyncSession, action: str) -> AsyncIterator[None]:
    """Roll back and re-raise SQLAlchemy failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage failure while %s: %s", action, exc)
        await session.rollback()
        raise StorageError(f"Storage failure while {action}") from exc
