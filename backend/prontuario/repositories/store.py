"""Record store.

Single entry point for persistence of the three collections. Every
operation on :class:`RecordStore` runs in its own database transaction, so a
reader never observes a half-written record. Workflows that span several
writes open :meth:`RecordStore.transaction` and run against one
:class:`StoreTransaction` instead.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from prontuario.database import build_session_maker, init_db
from prontuario.exceptions import StorageUnavailableError
from prontuario.repositories.collections import get_collection

logger = logging.getLogger(__name__)


class StoreTransaction:
    """Store operations bound to one open database transaction.

    Reads issued after a write in the same transaction see that write, since
    the session flushes pending changes before every query.
    """

    def __init__(self, db: AsyncSession):
        """Initialize with an async session that already has a transaction open.

        Args:
            db: Async SQLAlchemy session.
        """
        self.db = db

    async def put(self, collection: str, record: Any) -> None:
        """Insert or fully replace a record by its primary key."""
        config = get_collection(collection)
        await self.db.merge(config.to_row(record))
        await self.db.flush()

    async def get(self, collection: str, key: str) -> Any | None:
        """Get a record by primary key.

        Returns:
            The parsed record, or None if the key does not exist.
        """
        config = get_collection(collection)
        row = await self.db.get(config.model_class, key)
        if row is None:
            return None
        return config.parse(row.data)

    async def get_all(self, collection: str) -> list[Any]:
        """Get every record in a collection, in no particular order."""
        config = get_collection(collection)
        result = await self.db.execute(select(config.model_class))
        return [config.parse(row.data) for row in result.scalars().all()]

    async def get_by_index(self, collection: str, index_name: str, value: Any) -> list[Any]:
        """Get all records whose indexed field equals ``value``.

        Args:
            collection: Collection name.
            index_name: Record field name of the index (e.g. ``patientId``).
            value: Value to match exactly.

        Raises:
            ValueError: If the collection has no such index.
        """
        config = get_collection(collection)
        column = config.index_column(index_name)
        result = await self.db.execute(select(config.model_class).where(column == value))
        return [config.parse(row.data) for row in result.scalars().all()]

    async def delete(self, collection: str, key: str) -> bool:
        """Delete a record by primary key.

        Returns:
            True if a record was deleted, False if there was nothing to delete.
        """
        config = get_collection(collection)
        result = await self.db.execute(
            delete(config.model_class).where(config.key_attribute == key)
        )
        return (result.rowcount or 0) > 0

    async def clear(self, collection: str) -> int:
        """Delete every record in a collection.

        Returns:
            Number of records removed.
        """
        config = get_collection(collection)
        result = await self.db.execute(delete(config.model_class))
        return result.rowcount or 0


class RecordStore:
    """Durable key/value collections for patients, events and settings."""

    def __init__(self, engine: AsyncEngine):
        """Initialize the store on an async engine.

        Args:
            engine: Async SQLAlchemy engine for the local database file.
        """
        self.engine = engine
        self._session_maker = build_session_maker(engine)

    async def init(self) -> None:
        """Create missing collections. Safe to call on an initialized store."""
        try:
            await init_db(self.engine)
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Could not initialize record store: %s", exc)
            raise StorageUnavailableError(f"Could not open the database: {exc}") from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StoreTransaction]:
        """Run several operations atomically.

        Commits when the block exits normally and rolls back if it raises.

        Raises:
            StorageUnavailableError: If the database fails to open or commit.
        """
        try:
            async with self._session_maker() as db:
                async with db.begin():
                    yield StoreTransaction(db)
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Store transaction failed: %s", exc)
            raise StorageUnavailableError(f"Storage unavailable: {exc}") from exc

    async def put(self, collection: str, record: Any) -> None:
        async with self.transaction() as tx:
            await tx.put(collection, record)

    async def get(self, collection: str, key: str) -> Any | None:
        async with self.transaction() as tx:
            return await tx.get(collection, key)

    async def get_all(self, collection: str) -> list[Any]:
        async with self.transaction() as tx:
            return await tx.get_all(collection)

    async def get_by_index(self, collection: str, index_name: str, value: Any) -> list[Any]:
        async with self.transaction() as tx:
            return await tx.get_by_index(collection, index_name, value)

    async def delete(self, collection: str, key: str) -> bool:
        async with self.transaction() as tx:
            return await tx.delete(collection, key)

