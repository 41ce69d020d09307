"""Affinity store: which exercises get picked for which query."""

import logging
from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, TypeAdapter

from ..search.text import normalize
from .base import PersistedCollection

logger = logging.getLogger(__name__)

AFFINITY_STORAGE_KEY = "exercise.search.affinity"
MAX_AFFINITIES_PER_QUERY = 5
MAX_AFFINITY_SCORE = 10


class QueryAffinity(BaseModel):
    exercise_id: str
    score: int
    last_chosen_at: datetime


class AffinityStore(PersistedCollection[Dict[str, List[QueryAffinity]]]):
    """Per normalized query, at most MAX_AFFINITIES_PER_QUERY entries, most recent first."""

    key = AFFINITY_STORAGE_KEY

    def __init__(self, db=None, clock=None) -> None:
        super().__init__(
            TypeAdapter(Dict[str, List[QueryAffinity]]), dict, db=db, clock=clock
        )

    async def record(self, query: str, exercise_id: str) -> None:
        """Reinforce query -> exercise_id and move it to the front of its list."""
        normalized = normalize(query)
        if not normalized or not exercise_id:
            return

        affinities = await self._read()
        entries = affinities.get(normalized, [])
        previous = next((e for e in entries if e.exercise_id == exercise_id), None)
        entry = QueryAffinity(
            exercise_id=exercise_id,
            score=min((previous.score if previous else 0) + 1, MAX_AFFINITY_SCORE),
            last_chosen_at=self.now(),
        )
        others = [e for e in entries if e.exercise_id != exercise_id]
        affinities[normalized] = ([entry] + others)[:MAX_AFFINITIES_PER_QUERY]
        await self._store(affinities)
        logger.debug("Affinity %r -> %s is now %d", normalized, exercise_id, entry.score)

    def entries(self, query: str) -> list[QueryAffinity]:
        return list(self._items.get(normalize(query), []))

    def exercise_ids(self, query: str) -> list[str]:
        return [e.exercise_id for e in self.entries(query)]

    def affinity_score(self, query: str, exercise_id: str) -> float:
        """Stored score scaled into [0, 1]."""
        for entry in self._items.get(normalize(query), []):
            if entry.exercise_id == exercise_id:
                return min(entry.score / MAX_AFFINITY_SCORE, 1.0)
        return 0.0

    async def cleanup(self, existing_ids: set[str]) -> int:
        """Drop entries for missing exercises and queries left empty."""
        affinities = await self._read()
        cleaned = {}
        removed = 0
        for query, entries in affinities.items():
            kept = [e for e in entries if e.exercise_id in existing_ids]
            removed += len(entries) - len(kept)
            if kept:
                cleaned[query] = kept
        if cleaned != affinities:
            await self._store(cleaned)
        else:
            self._items = affinities
        return removed
