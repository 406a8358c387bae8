"""
Database lifecycle for the saved-item library.

One async engine per process, created lazily from ``Settings.database_url``.
Route handlers and the save pipeline open short units of work with
``get_session()``; repositories only ``flush()`` and the context manager
commits (or rolls back when the block raises)::

    async with get_session() as session:
        item = await SavedItemRepository(session).get(user_id, item_id)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.core.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for library tables."""


# Process-wide engine and session factory; tests swap ``_engine`` directly.
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _prepare_sqlite_path(db_url: str) -> None:
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def get_engine(url: str | None = None) -> AsyncEngine:
    """Return the library engine, creating it from settings on first use."""
    global _engine
    if _engine is None:
        db_url = url or get_settings().database_url
        _prepare_sqlite_path(db_url)
        _engine = create_async_engine(db_url, echo=False)
        logger.info("Library database: %s", make_url(db_url).render_as_string(hide_password=True))
    return _engine


def get_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        # Items are read back after commit (API responses), so keep them loaded.
        _session_factory = async_sessionmaker(engine or get_engine(), expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """One unit of work: commit when the block finishes, roll back if it raises."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create the library tables that do not exist yet.

    Safe to call on every startup.

    Args:
        engine: Engine to initialize; defaults to the settings engine.
    """
    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def reset_engine() -> None:
    """Forget the engine without disposing it (tests own the injected engine)."""
    global _engine, _session_factory
    _engine = None
    _session_factory = None
