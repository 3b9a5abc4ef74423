"""SQLAlchemy async engine, session factory and schema initialization."""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from prontuario.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for a SQLite file with durable writes.

    WAL journaling plus ``synchronous=FULL`` means a committed write survives
    a crash or power loss.
    """
    engine = create_async_engine(database_url, echo=settings.debug)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, _connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=FULL")
            cursor.close()

    return engine


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url)


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create missing tables. Existing tables are left as they are."""
    # Import models so they register on Base.metadata
    from prontuario import models  # noqa: F401

    target = target or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Schema ensured on %s", target.url)
