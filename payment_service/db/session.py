"""
Database Session Management

Builds the async engine and session factory and manages the connection pool
over the application's lifetime. The engine is owned by whoever creates it
(the FastAPI lifespan in production, fixtures in tests); nothing here keeps a
module-level pool.
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from payment_service.config import Settings
from payment_service.core.exceptions import DatabaseUnavailableError
from payment_service.db.base import Base

logger = logging.getLogger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine with a bounded connection pool."""
    execution_options = {}
    if settings.database_schema:
        execution_options["schema_translate_map"] = {None: settings.database_schema}

    return create_async_engine(
        str(settings.database_url),
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        pool_pre_ping=True,
        echo=settings.debug,
        execution_options=execution_options,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory handed to the store gateway."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def wait_for_db(engine: AsyncEngine, retries: int = 12, delay: float = 2.0) -> None:
    """
    Block until the database accepts connections.

    Args:
        engine: Engine to probe
        retries: Number of connection attempts
        delay: Seconds to sleep between attempts

    Raises:
        DatabaseUnavailableError: If every attempt failed
    """
    for attempt in range(1, retries + 1):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info(f"Database reachable after {attempt} attempt(s)")
            return
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database not reachable (attempt {attempt}/{retries}): {e}")
            if attempt < retries:
                await asyncio.sleep(delay)

    raise DatabaseUnavailableError("payment DB unavailable")


async def init_db(engine: AsyncEngine, settings: Settings) -> None:
    """Create schema and tables if configured to."""
    # Import models to register them
    from payment_service.db.models import payment, idempotency  # noqa: F401

    if not settings.should_create_tables:
        return

    async with engine.begin() as conn:
        if settings.database_schema and conn.dialect.name == "postgresql":
            await conn.execute(
                text(f'CREATE SCHEMA IF NOT EXISTS "{settings.database_schema}"')
            )
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Close database connection pool."""
    await engine.dispose()
