"""
Database connection and pool management
"""

import asyncpg
import logging
from pathlib import Path

from config.settings import (
    DATABASE_URL,
    DB_POOL_MIN_SIZE,
    DB_POOL_MAX_SIZE,
    DB_COMMAND_TIMEOUT,
    INIT_DB_SCHEMA,
)
from services.exceptions import StoreError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Global database pool
db_pool = None

async def init_database():
    """Initialize database connection pool"""
    global db_pool
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL environment variable is required")

    db_pool = await asyncpg.create_pool(
        DATABASE_URL,
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_MAX_SIZE,
        command_timeout=DB_COMMAND_TIMEOUT,
        statement_cache_size=0  # pgbouncer compatibility
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")
        if INIT_DB_SCHEMA:
            await apply_schema(conn)

    logger.info("Database initialized successfully")


async def apply_schema(conn: asyncpg.Connection):
    """Create the customers and addresses tables when they do not exist"""
    await conn.execute(SCHEMA_PATH.read_text())
    logger.info(f"Applied schema from {SCHEMA_PATH.name}")


async def close_database():
    """Close database connection pool"""
    global db_pool
    if db_pool:
        await db_pool.close()
        db_pool = None
    logger.info("Database connections closed")

def set_db_pool(pool):
    """Install an already created pool (used by tests and scripts)"""
    global db_pool
    db_pool = pool

def get_db_pool():
    """Get the database pool instance"""
    if db_pool is None:
        raise StoreError("Database connection failed.")
    return db_pool

def affected_rows(status: str) -> int:
    """Row count from an asyncpg command status such as 'UPDATE 1' or 'DELETE 0'"""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0
