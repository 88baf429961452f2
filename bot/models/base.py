"""Database base and session setup."""
import logging

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

import config

logger = logging.getLogger("norcustoms.db")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


engine = create_async_engine(
    config.DATABASE_URL,
    echo=False,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session():
    """Async generator yielding database sessions. Use: async for session in get_async_session(): ..."""
    async with async_session_factory() as session:
        yield session


# Migrations for databases created before the Heroes Profile ARAM and replay result columns
_MIGRATIONS = [
    "ALTER TABLE hots_accounts ADD COLUMN HP_AR_MMR INTEGER",
    "ALTER TABLE hots_accounts ADD COLUMN HP_AR_Games INTEGER",
    "ALTER TABLE hots_replays ADD COLUMN game_length INTEGER",
    "ALTER TABLE hots_replays ADD COLUMN winning_team INTEGER",
]


async def _run_migrations(conn) -> None:
    """Add new columns if they don't exist."""
    for sql in _MIGRATIONS:
        try:
            await conn.execute(text(sql))
        except OperationalError:
            logger.debug("Migration skipped (column exists): %s", sql)


async def init_db() -> None:
    """Create all tables and run migrations."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await _run_migrations(conn)
