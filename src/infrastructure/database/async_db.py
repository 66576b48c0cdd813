"""
Asynchronous Database Module

This module owns the SQLAlchemy asyncio engine used by the session and
credential stores. A single :class:`Database` is constructed at process start
(see ``src.core.lifecycle``), stored on ``app.state`` and injected into request
handlers through :func:`get_db`. Nothing here is created at import time.

PostgreSQL (asyncpg) is the production driver. SQLite (aiosqlite) is supported
for development and tests; SQLite connections open every transaction with
``BEGIN IMMEDIATE`` so that concurrent writers queue on the database lock
instead of failing on a read-to-write lock upgrade.

Key Components:
    - Database: engine, session factory and schema lifecycle.
    - get_db: FastAPI dependency yielding a request-scoped AsyncSession.
"""

from __future__ import annotations

from typing import AsyncGenerator

import structlog
from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

logger = structlog.get_logger(__name__)


def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
    """Hands transaction control to SQLAlchemy's ``begin`` event."""
    dbapi_connection.isolation_level = None


def _begin_immediate(conn) -> None:
    """Takes the write lock up front so concurrent writers serialize."""
    conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Explicitly constructed store handle with a clear open/close lifecycle.

    Args:
        url: SQLAlchemy async URL, e.g. ``postgresql+asyncpg://...`` or
            ``sqlite+aiosqlite:///./authcore.db``.
        echo: Log emitted SQL.
        pool_size: Connection pool size (PostgreSQL only).
        max_overflow: Extra connections above ``pool_size`` (PostgreSQL only).
        pool_timeout: Seconds to wait for a pooled connection (PostgreSQL only).
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: float = 5.0,
    ) -> None:
        self.url = url
        self.is_sqlite = url.startswith("sqlite")
        if self.is_sqlite:
            self.engine: AsyncEngine = create_async_engine(
                url, echo=echo, connect_args={"timeout": 30}
            )
            event.listen(self.engine.sync_engine, "connect", _disable_pysqlite_transactions)
            event.listen(self.engine.sync_engine, "begin", _begin_immediate)
        else:
            self.engine = create_async_engine(
                url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_pre_ping=True,
            )
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False
        )

    def session(self) -> AsyncSession:
        """Returns a new AsyncSession bound to this database."""
        return self.session_factory()

    async def create_all(self) -> None:
        """Create tables for every registered SQLModel entity."""
        # Entity modules must be imported so their tables are registered.
        import src.domain.entities  # noqa: F401

        logger.info("Creating database tables")
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables created")

    async def ping(self) -> bool:
        """Runs ``SELECT 1``; returns False instead of raising when unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            return False

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields a request-scoped AsyncSession.

    The transaction is rolled back if the handler raises or the request is
    cancelled, and the session is always closed.

    Yields:
        AsyncSession: An asynchronous database session for use in FastAPI routes.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except BaseException:
            await session.rollback()
            logger.debug("Async database session rolled back")
            raise
