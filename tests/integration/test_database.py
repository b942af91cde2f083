"""Integration tests for database setup.

Tests verify:
- Database initialization creates all tables
- The transactional scope commits and rolls back
- Sessions are scoped per asyncio task
- Finished requests and cancelled tasks release their sessions
"""

import asyncio

import pytest
from sqlalchemy import inspect, select

from entities import Tag
from generic_dao.config import PersistenceConfig
from generic_dao.dao import WriteableDAO
from generic_dao.database import Database
from generic_dao.errors import InvalidArgumentError


class TestDatabaseInitialization:
    """Tests for database initialization."""

    async def test_init_db_creates_all_tables(self, test_db: Database):
        """Verify init_db creates a table per mapped entity."""
        async with test_db.engine.connect() as conn:
            table_names = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )

        assert {"dummies", "dummy_elements", "tags", "pairings"} <= set(table_names)

    async def test_database_url_conversion_sqlite(self):
        """Verify sqlite:/// URLs are converted to async format."""
        db = Database("sqlite:///./test.db")
        assert "aiosqlite" in str(db.engine.url)
        await db.close()

    async def test_database_url_preserves_async_format(self):
        db = Database("sqlite+aiosqlite:///:memory:")
        assert "aiosqlite" in str(db.engine.url)
        await db.close()

    def test_empty_url_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Database("")

    async def test_from_config(self):
        config = PersistenceConfig(database_url="sqlite:///:memory:", echo=True)

        db = Database.from_config(config)

        assert db.engine.url.drivername == "sqlite+aiosqlite"
        assert db.engine.sync_engine.echo is True
        await db.close()

    async def test_connect_creates_tables_when_configured(self):
        config = PersistenceConfig(
            database_url="sqlite+aiosqlite:///:memory:", auto_create_tables=True
        )

        db = await Database.connect(config)
        async with db.engine.connect() as conn:
            table_names = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )

        assert "tags" in table_names
        await db.close()

    async def test_connect_leaves_schema_alone_by_default(self):
        config = PersistenceConfig(database_url="sqlite+aiosqlite:///:memory:")

        db = await Database.connect(config)
        async with db.engine.connect() as conn:
            table_names = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )

        assert table_names == []
        await db.close()


class TestTransactionalScope:
    """Tests for the session() context manager."""

    async def test_session_commits_on_success(self, test_db: Database):
        async with test_db.session() as session:
            session.add(Tag(code="py", label="Python"))
        await test_db.remove_session()

        async with test_db.session() as session:
            tag = await session.scalar(select(Tag).where(Tag.code == "py"))

        assert tag is not None
        assert tag.label == "Python"

    async def test_session_rolls_back_on_error(self, test_db: Database):
        with pytest.raises(RuntimeError):
            async with test_db.session() as session:
                session.add(Tag(code="py", label="Python"))
                await session.flush()
                raise RuntimeError("boom")

        async with test_db.session() as session:
            assert await session.get(Tag, "py") is None


class TestSessionScope:
    """Tests for task-scoped sessions."""

    async def test_same_task_shares_session(self, test_db: Database):
        assert test_db.has_session() is False
        first = test_db.current_session()

        assert test_db.current_session() is first
        assert test_db.has_session() is True

    async def test_tasks_get_their_own_session(self, test_db: Database):
        async def grab():
            return test_db.current_session()

        first, second = await asyncio.gather(grab(), grab())

        assert first is not second
        assert first is not test_db.current_session()

    async def test_remove_session_unbinds(self, test_db: Database):
        first = test_db.current_session()

        await test_db.remove_session()

        assert test_db.has_session() is False
        assert test_db.current_session() is not first


class TestSessionRelease:
    """Tests that sessions do not outlive their task."""

    async def test_cancelled_block_returns_connection(self, tmp_path):
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'cancel.db'}")
        await db.init_db()
        flushed = asyncio.Event()
        sessions = []

        async def work():
            async with db.session() as session:
                sessions.append(session)
                session.add(Tag(code="py", label="Python"))
                await session.flush()
                flushed.set()
                await asyncio.sleep(10)

        task = asyncio.create_task(work())
        await flushed.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert sessions[0].in_transaction() is False
        assert db.engine.pool.checkedout() == 0

        async with db.request() as session:
            assert await session.get(Tag, "py") is None
        await db.close()

    async def test_finished_requests_leave_registry_empty(self, test_db: Database):
        tags = WriteableDAO(test_db, Tag)

        async def handle(i: int):
            async with test_db.request():
                await tags.save(Tag(code=f"t{i}", label="Tag"))

        for i in range(50):
            await asyncio.create_task(handle(i))

        assert test_db._scoped_session.registry.registry == {}
        async with test_db.request() as session:
            assert await session.get(Tag, "t49") is not None

    async def test_request_commits_and_unbinds(self, test_db: Database):
        async with test_db.request() as session:
            session.add(Tag(code="py", label="Python"))

        assert test_db.has_session() is False
        async with test_db.request() as session:
            assert await session.get(Tag, "py") is not None

    async def test_request_unbinds_after_error(self, test_db: Database):
        with pytest.raises(RuntimeError):
            async with test_db.request() as session:
                session.add(Tag(code="py", label="Python"))
                await session.flush()
                raise RuntimeError("boom")

        assert test_db.has_session() is False
        async with test_db.request() as session:
            assert await session.get(Tag, "py") is None
