"""Async repositories over the stored-collection table."""

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from .models import Base, StoredCollection

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Primary-key reads and writes for one model. Callers own the session and its commit."""

    def __init__(self, model: Type[ModelType]) -> None:
        self.model = model

    async def get(self, session: AsyncSession, key) -> Optional[ModelType]:
        return await session.get(self.model, key)

    async def add(self, session: AsyncSession, **values) -> ModelType:
        row = self.model(**values)
        session.add(row)
        await session.flush()
        return row

    async def update(self, session: AsyncSession, row: ModelType, **values) -> ModelType:
        for field, value in values.items():
            setattr(row, field, value)
        await session.flush()
        return row


class CollectionRepository(BaseRepository[StoredCollection]):
    """Whole-collection reads and rewrites, one JSON payload per key."""

    async def get_payload(self, session: AsyncSession, key: str) -> Optional[str]:
        row = await self.get(session, key)
        return row.payload if row else None

    async def put_payload(
        self, session: AsyncSession, key: str, payload: str
    ) -> StoredCollection:
        """Replace the payload under key, inserting it on first write."""
        row = await self.get(session, key)
        if row is None:
            return await self.add(session, key=key, payload=payload)
        return await self.update(session, row, payload=payload)


# Repository instances
collection_repo = CollectionRepository(StoredCollection)
