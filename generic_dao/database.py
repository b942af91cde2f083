"""Async SQLAlchemy database setup."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncGenerator

from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_scoped_session,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from generic_dao.errors import InvalidArgumentError

if TYPE_CHECKING:
    from generic_dao.config import PersistenceConfig

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Async database connection manager.

    Owns the pooled engine, the session factory and a task-scoped session
    registry. DAOs obtain the unit-of-work of the calling asyncio task through
    ``current_session()``; callers delimit transactions with ``session()``.
    """

    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
        pool_size: int | None = None,
        max_overflow: int | None = None,
        pool_timeout: float | None = None,
        pool_recycle: int | None = None,
        pool_pre_ping: bool = False,
        sqlite_timeout: int = 30,
    ):
        """Initialize database with connection URL.

        Args:
            database_url: SQLAlchemy database URL. If using sqlite:///, it will
                         be automatically converted to sqlite+aiosqlite:///.
            echo: Log every SQL statement through SQLAlchemy's logger.
            pool_size: Connections kept open in the pool (non-SQLite only).
            max_overflow: Connections allowed beyond ``pool_size``.
            pool_timeout: Seconds to wait for a pooled connection.
            pool_recycle: Recycle connections older than this many seconds.
            pool_pre_ping: Test connections for liveness on checkout.
            sqlite_timeout: Seconds SQLite waits on a locked database.
        """
        if not database_url:
            raise InvalidArgumentError("Parameter database_url cannot be empty")

        # Convert sqlite:/// to sqlite+aiosqlite:/// for async support
        is_sqlite = database_url.startswith("sqlite")
        if database_url.startswith("sqlite:///") and "aiosqlite" not in database_url:
            database_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///")

        engine_options: dict[str, Any] = {"echo": echo, "pool_pre_ping": pool_pre_ping}
        if is_sqlite:
            # Increase timeout to reduce "database is locked" errors
            engine_options["connect_args"] = {"timeout": sqlite_timeout}
        else:
            pool_options = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_timeout": pool_timeout,
                "pool_recycle": pool_recycle,
            }
            engine_options.update({k: v for k, v in pool_options.items() if v is not None})

        self._engine: AsyncEngine = create_async_engine(database_url, **engine_options)
        self._async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._scoped_session: async_scoped_session[AsyncSession] = async_scoped_session(
            self._async_session,
            scopefunc=asyncio.current_task,
        )
        logger.debug("Database engine created for %s", self._engine.url)

    @classmethod
    def from_config(cls, config: PersistenceConfig) -> Database:
        """Build a Database from persistence settings."""
        return cls(
            config.url(),
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=config.pool_pre_ping,
            sqlite_timeout=config.sqlite_timeout,
        )

    @classmethod
    async def connect(cls, config: PersistenceConfig) -> Database:
        """Build a Database from settings, creating tables when configured to.

        Tables are created only if ``config.auto_create_tables`` is set.
        """
        db = cls.from_config(config)
        if config.auto_create_tables:
            await db.init_db()
        return db

    @property
    def engine(self) -> AsyncEngine:
        """Get the async engine instance."""
        return self._engine

    def current_session(self) -> AsyncSession:
        """Return the session bound to the calling asyncio task.

        The same session is returned for every call made from one task until
        ``remove_session()`` is awaited from that task.
        """
        return self._scoped_session()

    def has_session(self) -> bool:
        """Whether the calling task already has a session bound."""
        return self._scoped_session.registry.has()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope around a series of operations.

        Usage:
            async with db.session() as session:
                await dao.save(entity)
                # commit happens automatically on success
                # rollback happens automatically on exception

        The session remains bound to the task afterwards, so instances loaded
        inside the block stay in its identity map.

        Yields:
            AsyncSession: The calling task's session.
        """
        session = self.current_session()
        try:
            yield session
            await session.commit()
        except BaseException:
            # Cancellation included, so the connection goes back to the pool
            await session.rollback()
            raise

    @asynccontextmanager
    async def request(self) -> AsyncGenerator[AsyncSession, None]:
        """Run one logical request in its own unit of work.

        Same transactional scope as ``session()``, but the task's session is
        closed and unbound on exit, so finished tasks leave nothing behind in
        the registry.

        Usage:
            async with db.request():
                book = await books.find_by_id(book_id)
        """
        try:
            async with self.session() as session:
                yield session
        finally:
            await self.remove_session()

    async def remove_session(self) -> None:
        """Close the calling task's session and unbind it.

        Every task that used ``current_session()`` outside ``request()``
        should await this when its logical request ends.
        """
        await self._scoped_session.remove()

    async def init_db(self, metadata: MetaData | None = None) -> None:
        """Create tables for every mapped entity.

        Creates all tables defined in ``metadata`` (``Base.metadata`` by
        default) if they don't exist. For production, use migrations instead.
        """
        metadata = metadata if metadata is not None else Base.metadata
        async with self._engine.begin() as conn:
            if conn.dialect.name == "sqlite":
                # WAL allows readers and writers to operate concurrently
                await conn.execute(text("PRAGMA journal_mode=WAL"))
                await conn.execute(text("PRAGMA busy_timeout=30000"))
            await conn.run_sync(metadata.create_all)
        logger.info("Created tables: %s", ", ".join(sorted(metadata.tables)))

    async def close(self) -> None:
        """Close database connections and dispose of the engine."""
        await self._engine.dispose()
