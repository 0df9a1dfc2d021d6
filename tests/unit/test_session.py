"""
Database Session Unit Tests
"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from payment_service.config import Settings
from payment_service.core.exceptions import DatabaseUnavailableError
from payment_service.db.session import close_db, init_db, wait_for_db


class TestWaitForDb:
    """Tests for the startup connectivity loop."""

    @pytest.mark.asyncio
    async def test_reachable_database(self, test_engine):
        await wait_for_db(test_engine, retries=1, delay=0)

    @pytest.mark.asyncio
    async def test_unreachable_database(self, tmp_path):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'payments.db'}"
        )

        with pytest.raises(DatabaseUnavailableError):
            await wait_for_db(engine, retries=2, delay=0)

        await close_db(engine)


class TestInitDb:
    """Tests for table creation on startup."""

    @pytest.mark.asyncio
    async def test_creates_tables_when_enabled(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")

        await init_db(engine, Settings(database_create_tables=True))

        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert {"payments", "idempotency_keys"} <= set(tables)

        await close_db(engine)

    @pytest.mark.asyncio
    async def test_skips_tables_when_disabled(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")

        await init_db(engine, Settings(database_create_tables=False))

        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert tables == []

        await close_db(engine)
