"""
Database connection and pool management
"""

import asyncpg
import logging

logger = logging.getLogger(__name__)


async def init_database(database_url: str) -> asyncpg.Pool:
    """Create the connection pool and verify it can reach the database"""
    db_pool = await asyncpg.create_pool(
        database_url,
        min_size=2,
        max_size=10,
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")

    logger.info("Database initialized successfully")
    return db_pool


async def close_database(db_pool: asyncpg.Pool):
    """Close database connection pool"""
    if db_pool:
        await db_pool.close()
    logger.info("Database connections closed")
