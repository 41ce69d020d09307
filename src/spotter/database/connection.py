"""Async SQLAlchemy engine and session lifecycle."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import config
from .models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the engine for one database URL (config.database.url by default)."""

    def __init__(self, url: str | None = None) -> None:
        self._url = url
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def url(self) -> str:
        return self._url or config.database.url

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    async def initialize(self) -> None:
        """Create the engine once. Pool sizing applies to server databases only."""
        if self._engine is not None:
            return

        options: dict = {"echo": config.debug}
        if not self.url.startswith("sqlite"):
            options.update(
                pool_size=config.database.pool_size,
                max_overflow=config.database.max_overflow,
                pool_timeout=config.database.pool_timeout,
            )
        self._engine = create_async_engine(self.url, **options)
        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False)
        logger.debug("Database engine created for %s", self._engine.url.render_as_string())

    async def create_tables(self) -> None:
        """Create any missing tables. Existing data is left alone."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """A session that commits on success and rolls back on any error."""
        if self._sessionmaker is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database health check failed")
            return False
        return True


# Global database manager instance
db_manager = DatabaseManager()
