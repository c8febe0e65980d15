"""
Database connection pool module.

Creates the asyncpg connection pool used by the record store. The pool is
opened once per process by the transport entry points through
`open_pool()`, handed explicitly to the store, and closed when the
context exits, including on interrupt.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import anyio
import asyncpg

from people_mcp.config import Settings

logger = logging.getLogger(__name__)


async def create_pool(settings: Settings) -> asyncpg.Pool:
    """
    Create a new connection pool from the given settings.

    A configured DATABASE_URL wins over the individual DB_* values.

    Args:
        settings: The application settings.

    Returns:
        asyncpg.Pool: The freshly opened pool.
    """
    if settings.DATABASE_URL:
        return await asyncpg.create_pool(
            dsn=settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
        )

    return await asyncpg.create_pool(
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        database=settings.DB_NAME,
        user=settings.DB_USER,
        password=settings.DB_PASSWORD,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
    )


@asynccontextmanager
async def open_pool(settings: Settings) -> AsyncIterator[asyncpg.Pool]:
    """
    Open the pool for the lifetime of the `async with` block and close it
    afterwards, releasing all database connections.
    """
    pool = await create_pool(settings)
    logger.info("Database pool opened")
    try:
        yield pool
    finally:
        # Shielded so the pool still closes when the caller was cancelled
        with anyio.CancelScope(shield=True):
            await pool.close()
        logger.info("Database pool closed")
