"""Application lifecycle management.

This module handles application startup and shutdown events. The database
handle is opened once here (unless one was injected into the application
factory) and disposed on shutdown; an optional background task purges expired
sessions for storage hygiene.
"""

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI

from src.core.config.settings import settings
from src.core.logging import logger
from src.domain.services.auth.session import SessionTokenManager
from src.infrastructure.database.async_db import Database


async def sweep_expired_sessions(database: Database, interval_seconds: int) -> None:
    """Periodically delete expired sessions until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with database.session() as db_session:
                await SessionTokenManager(db_session).purge_expired()
        except Exception as e:
            logger.error("session_sweep_failed", error=str(e))


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Opens the store, creates tables and starts the sweep; undoes it all on shutdown.

        Args:
            app (FastAPI): The FastAPI application instance

        Raises:
            RuntimeError: If the database is unavailable during startup
        """
        owns_database = getattr(app.state, "database", None) is None
        if owns_database:
            app.state.database = Database(
                settings.DATABASE_URL,
                echo=settings.DATABASE_ECHO,
                pool_size=settings.POSTGRES_POOL_SIZE,
                max_overflow=settings.POSTGRES_MAX_OVERFLOW,
                pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
            )
        database: Database = app.state.database

        if not await database.ping():
            logger.error("database_unavailable_on_startup")
            raise RuntimeError("Database unavailable")
        await database.create_all()

        sweeper = None
        if settings.SESSION_SWEEP_INTERVAL_SECONDS > 0:
            sweeper = asyncio.create_task(
                sweep_expired_sessions(database, settings.SESSION_SWEEP_INTERVAL_SECONDS)
            )
        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        if sweeper is not None:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
        if owns_database:
            await database.dispose()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
