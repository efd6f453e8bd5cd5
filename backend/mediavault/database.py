"""SQLAlchemy async engine & session for SQLite (WAL mode)."""

from __future__ import annotations

import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from mediavault.models.base import Base

logger = logging.getLogger(__name__)

# Bump when the table layout changes; stored in PRAGMA user_version.
SCHEMA_VERSION = 1


def _configure_sqlite(dbapi_conn, _connection_record):
    """Apply SQLite PRAGMAs for durable, concurrent access."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA cache_size=-8000")  # 8 MB
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def database_url(path: str) -> str:
    return f"sqlite+aiosqlite:///{path}"


def create_engine(url: str, pool_size: int = 5, echo: bool = False) -> AsyncEngine:
    """Create an async engine with the SQLite PRAGMAs applied per connection."""
    kwargs = {}
    if ":memory:" not in url:
        kwargs.update(pool_size=pool_size, max_overflow=0)
    engine = create_async_engine(url, echo=echo, **kwargs)
    event.listen(engine.sync_engine, "connect", _configure_sqlite)
    return engine


async def init_db(engine: AsyncEngine) -> int:
    """Create all tables and stamp the schema version. Returns the version."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        result = await conn.exec_driver_sql("PRAGMA user_version")
        version = result.scalar() or 0
        if version < SCHEMA_VERSION:
            await conn.exec_driver_sql(f"PRAGMA user_version = {SCHEMA_VERSION}")
            logger.info("Database schema upgraded: v%d -> v%d", version, SCHEMA_VERSION)
            version = SCHEMA_VERSION
    return version


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields a session on the local store's database."""
    from mediavault.services import get_local_store

    session_factory = await get_local_store().session_factory()
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
