"""Whole-collection persistence shared by the learning-signal stores."""

import logging
from datetime import datetime, timezone
from typing import Callable, Generic, TypeVar

from pydantic import TypeAdapter
from sqlalchemy.exc import SQLAlchemyError

from ..database.connection import DatabaseManager, db_manager
from ..database.repository import collection_repo

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]

# Faults that mean "storage unusable": driver errors, bad JSON or schema
# (pydantic ValidationError is a ValueError), uninitialized database.
STORAGE_ERRORS = (SQLAlchemyError, ValueError, RuntimeError, OSError)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PersistedCollection(Generic[T]):
    """A collection stored as one JSON payload under a fixed key.

    Reads fall back to an empty collection and writes are dropped when
    storage fails; both are logged and never raised.
    """

    key: str

    def __init__(
        self,
        adapter: TypeAdapter[T],
        empty: Callable[[], T],
        db: DatabaseManager | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._adapter = adapter
        self._empty = empty
        self._db = db or db_manager
        self._clock = clock or utc_now
        self._items: T = empty()

    def now(self) -> datetime:
        return self._clock()

    def _decode(self, payload: str) -> T:
        return self._adapter.validate_json(payload)

    async def _read(self) -> T:
        try:
            async with self._db.get_session() as session:
                payload = await collection_repo.get_payload(session, self.key)
            if payload is None:
                return self._empty()
            return self._decode(payload)
        except STORAGE_ERRORS:
            logger.exception("Failed to load %s, using an empty collection", self.key)
            return self._empty()

    async def _write(self, items: T) -> None:
        try:
            payload = self._adapter.dump_json(items).decode("utf-8")
            async with self._db.get_session() as session:
                await collection_repo.put_payload(session, self.key, payload)
        except STORAGE_ERRORS:
            logger.exception("Failed to save %s", self.key)

    async def load(self) -> T:
        """Refresh the in-memory view from storage and return it."""
        self._items = await self._read()
        return self._items

    async def _store(self, items: T) -> None:
        await self._write(items)
        self._items = items
