"""Tests for the library database lifecycle.

Covers table creation by ``init_db()`` (repeatable on every startup) and
the commit / rollback behaviour of ``get_session()``.
"""

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import create_async_engine

from src.core.models import SavedItemCreate
from src.services.storage.database import get_session, init_db
from src.services.storage.models_db import SavedItem
from src.services.storage.repository import SavedItemRepository


async def test_init_db_creates_saved_items_and_is_repeatable(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'library.db'}", echo=False)
    try:
        await init_db(engine)
        await init_db(engine)  # every startup calls it again

        async with engine.connect() as conn:
            columns = await conn.run_sync(
                lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns("saved_items")}
            )
        assert {"user_id", "is_processing", "processing_start_time", "error_message"} <= columns
    finally:
        await engine.dispose()


async def test_session_commits_on_success(use_test_db):
    async with get_session() as session:
        item = await SavedItemRepository(session).create("u1", SavedItemCreate(text="kept"))

    async with get_session() as session:
        stored = await session.get(SavedItem, item.id)
    assert stored is not None
    assert stored.text == "kept"


async def test_session_rolls_back_on_error(use_test_db):
    with pytest.raises(RuntimeError):
        async with get_session() as session:
            await SavedItemRepository(session).create("u1", SavedItemCreate(text="lost"))
            raise RuntimeError("boom")

    async with get_session() as session:
        rows = (await session.execute(select(SavedItem))).scalars().all()
    assert rows == []
