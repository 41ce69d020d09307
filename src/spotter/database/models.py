"""SQLAlchemy async models for Spotter's durable key-value boundary."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.dialects.mysql import LONGTEXT
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _now_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class StoredCollection(Base):
    """One serialized collection (aliases, usage, affinity, user exercises) under its key.

    Collections are always read whole and rewritten whole.
    """

    __tablename__ = "stored_collections"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[str] = mapped_column(
        Text().with_variant(LONGTEXT(), "mysql"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_now_utc, onupdate=_now_utc
    )

    def __repr__(self) -> str:
        return f"<StoredCollection(key='{self.key}', bytes={len(self.payload or '')})>"
