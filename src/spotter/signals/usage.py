"""Usage store: how recently and how often each exercise was picked."""

import logging
import math
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, TypeAdapter

from .base import PersistedCollection

logger = logging.getLogger(__name__)

USAGE_STORAGE_KEY = "exercise.usage.stats"

# Recency decays with a 30 day time constant; frequency grows logarithmically.
RECENCY_DAYS = 30.0
FREQUENCY_WEIGHT = 0.3
MAX_RECENTS = 7


class UsageRecord(BaseModel):
    use_count: int = 0
    last_used_at: datetime
    last_context_id: Optional[str] = None


class UsageStore(PersistedCollection[Dict[str, UsageRecord]]):
    """Per-exercise usage counters. Counts only ever grow."""

    key = USAGE_STORAGE_KEY

    def __init__(self, db=None, clock=None) -> None:
        super().__init__(TypeAdapter(Dict[str, UsageRecord]), dict, db=db, clock=clock)

    @property
    def records(self) -> dict[str, UsageRecord]:
        return dict(self._items)

    async def record_usage(
        self, exercise_id: str, context_id: Optional[str] = None
    ) -> Optional[UsageRecord]:
        """Count one use of exercise_id now. Blank ids are ignored."""
        if not exercise_id:
            return None

        records = await self._read()
        existing = records.get(exercise_id)
        record = UsageRecord(
            use_count=(existing.use_count if existing else 0) + 1,
            last_used_at=self.now(),
            last_context_id=context_id or (existing.last_context_id if existing else None),
        )
        records[exercise_id] = record
        await self._store(records)
        logger.debug("Recorded use %d of %s", record.use_count, exercise_id)
        return record

    def get(self, exercise_id: str) -> Optional[UsageRecord]:
        return self._items.get(exercise_id)

    def raw_usage_score(self, exercise_id: str) -> float:
        record = self._items.get(exercise_id)
        if record is None:
            return 0.0
        days = max(0.0, (self.now() - record.last_used_at).total_seconds() / 86400)
        return math.exp(-days / RECENCY_DAYS) + FREQUENCY_WEIGHT * math.log1p(record.use_count)

    def usage_score(self, exercise_id: str) -> float:
        """Recency plus frequency, squashed into [0, 1)."""
        raw = self.raw_usage_score(exercise_id)
        return raw / (1.0 + raw)

    def context_score(self, exercise_id: str, context_id: Optional[str]) -> float:
        """1.0 if the exercise was last used in context_id, else 0.0."""
        if not context_id:
            return 0.0
        record = self._items.get(exercise_id)
        return 1.0 if record and record.last_context_id == context_id else 0.0

    def recent(self, limit: int = MAX_RECENTS) -> list[str]:
        """Exercise ids, most recently used first, ties broken by use count."""
        ordered = sorted(
            self._items.items(),
            key=lambda item: (item[1].last_used_at, item[1].use_count),
            reverse=True,
        )
        return [exercise_id for exercise_id, _ in ordered[: max(0, min(limit, MAX_RECENTS))]]

    async def cleanup(self, existing_ids: set[str]) -> int:
        records = await self._read()
        kept = {k: v for k, v in records.items() if k in existing_ids}
        removed = len(records) - len(kept)
        if removed:
            await self._store(kept)
        else:
            self._items = records
        return removed
