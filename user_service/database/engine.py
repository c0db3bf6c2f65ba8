"""Database engine and session management."""
import logging
from typing import List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import settings
from ..models.base import Base

logger = logging.getLogger(__name__)

# Global engine instance
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the database engine."""
    global _engine

    if _engine is None:
        options = {
            "echo": settings.database.echo,
            "pool_pre_ping": settings.database.pool_pre_ping,
            "pool_recycle": settings.database.pool_recycle,
        }
        if not settings.database.url.startswith("sqlite"):
            options["pool_size"] = settings.database.pool_size
            options["max_overflow"] = settings.database.max_overflow

        _engine = create_async_engine(settings.database.url, **options)
        logger.info("Database engine created")

    return _engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
        logger.info("Session factory created")

    return _session_factory


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Ensure the database schema exists."""
    engine = engine or get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables verified")


async def pending_tables(engine: AsyncEngine | None = None) -> List[str]:
    """Return model tables that are missing from the database."""
    engine = engine or get_engine()

    async with engine.connect() as conn:
        existing = await conn.run_sync(
            lambda sync_conn: set(inspect(sync_conn).get_table_names())
        )

    return [name for name in Base.metadata.tables if name not in existing]


async def migrate_db(engine: AsyncEngine | None = None) -> List[str]:
    """Create model tables that are still missing and return their names."""
    engine = engine or get_engine()

    missing = await pending_tables(engine)
    if missing:
        logger.info("Applying pending schema changes: %s", ", ".join(missing))
        tables = [Base.metadata.tables[name] for name in missing]
        async with engine.begin() as conn:
            await conn.run_sync(
                lambda sync_conn: Base.metadata.create_all(sync_conn, tables=tables)
            )

    return missing


async def close_db() -> None:
    """Close the database connections."""
    global _engine, _session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connections closed")
