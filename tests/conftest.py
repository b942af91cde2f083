"""Pytest configuration and fixtures."""

import pytest_asyncio

# Register test entities on Base.metadata before any database is initialized
import entities  # noqa: F401
from generic_dao.database import Database


@pytest_asyncio.fixture
async def test_db():
    """Create a fresh in-memory database for each test.

    Test bodies run DAO calls inside ``test_db.session()`` so the task's
    connection is released by the commit before teardown.
    """
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.init_db()
    yield db
    await db.close()
