"""Alias store: alternative names per exercise, from abbreviations, learning and users."""

import logging
import re
import uuid
from datetime import datetime
from typing import Iterable, List, Literal, NamedTuple, Optional

from pydantic import BaseModel, TypeAdapter

from ..catalog.schemas import Exercise, SystemExercise
from ..errors import InvalidExerciseName
from ..search.anchors import anchor_aliases
from ..search.text import normalize, tokenize
from .base import PersistedCollection

logger = logging.getLogger(__name__)

ALIAS_STORAGE_KEY = "exercise.aliases"

AliasSource = Literal["system", "learned", "manual"]

# abbreviation -> full form found in exercise names
ABBREVIATIONS: dict[str, str] = {
    "bb": "barbell",
    "db": "dumbbell",
    "kb": "kettlebell",
    "bw": "bodyweight",
    "ohp": "overhead press",
    "rdl": "romanian deadlift",
}

_WHITESPACE = re.compile(r"\s+")


class AliasRecord(BaseModel):
    id: str
    exercise_id: str
    alias: str
    normalized_alias: str
    source: AliasSource
    created_at: datetime


class AliasHit(NamedTuple):
    exercise_id: str
    alias: str
    match: Literal["exact", "prefix", "token"]


def generate_common(name: str) -> list[str]:
    """Abbreviation aliases plus the whitespace-free form of name."""
    normalized = normalize(name)
    aliases = [abbrev for abbrev, full in ABBREVIATIONS.items() if full in normalized]
    no_space = _WHITESPACE.sub("", normalized)
    if no_space != normalized:
        aliases.append(no_space)
    return aliases


class AliasStore(PersistedCollection[List[AliasRecord]]):
    """At most one record per (exercise id, normalized text)."""

    key = ALIAS_STORAGE_KEY

    def __init__(self, db=None, clock=None) -> None:
        super().__init__(TypeAdapter(List[AliasRecord]), list, db=db, clock=clock)

    generate_common = staticmethod(generate_common)

    @property
    def records(self) -> list[AliasRecord]:
        return list(self._items)

    def _new_record(self, exercise_id: str, text: str, source: AliasSource) -> AliasRecord:
        return AliasRecord(
            id=f"alias_{uuid.uuid4().hex}",
            exercise_id=exercise_id,
            alias=text.strip(),
            normalized_alias=normalize(text),
            source=source,
            created_at=self.now(),
        )

    @staticmethod
    def _find(records: Iterable[AliasRecord], exercise_id: str, normalized: str):
        for record in records:
            if record.exercise_id == exercise_id and record.normalized_alias == normalized:
                return record
        return None

    async def add_alias(
        self, exercise_id: str, text: str, source: AliasSource = "manual"
    ) -> AliasRecord:
        """Store an alias, or return the existing record for the same normalized text."""
        normalized = normalize(text)
        if not normalized:
            raise InvalidExerciseName("Alias text must not be empty")

        records = await self._read()
        existing = self._find(records, exercise_id, normalized)
        if existing is not None:
            self._items = records
            return existing

        record = self._new_record(exercise_id, text, source)
        await self._store(records + [record])
        logger.debug("Added %s alias %r for %s", source, record.alias, exercise_id)
        return record

    def aliases_for(self, exercise_id: str) -> list[AliasRecord]:
        return [r for r in self._items if r.exercise_id == exercise_id]

    def alias_texts_for(self, exercise_id: str) -> list[str]:
        return [r.alias for r in self._items if r.exercise_id == exercise_id]

    def find_by_query(self, query: str) -> list[AliasHit]:
        """Every stored alias matching query exactly, by prefix, or by a shared token."""
        normalized = normalize(query)
        if not normalized:
            return []
        query_tokens = set(tokenize(normalized))

        hits = []
        for record in self._items:
            if record.normalized_alias == normalized:
                hits.append(AliasHit(record.exercise_id, record.alias, "exact"))
            elif record.normalized_alias.startswith(normalized):
                hits.append(AliasHit(record.exercise_id, record.alias, "prefix"))
            elif query_tokens & set(tokenize(record.normalized_alias)):
                hits.append(AliasHit(record.exercise_id, record.alias, "token"))
        return hits

    async def learn(self, query: str, exercise_id: str) -> Optional[AliasRecord]:
        """Remember query as a learned alias unless the exercise already has it."""
        normalized = normalize(query)
        if not normalized:
            return None

        records = await self._read()
        if self._find(records, exercise_id, normalized) is not None:
            self._items = records
            return None

        record = self._new_record(exercise_id, query, "learned")
        await self._store(records + [record])
        logger.info("Learned alias %r for %s", record.alias, exercise_id)
        return record

    async def seed(self, exercises: Iterable[Exercise]) -> int:
        """Give System exercises their generated aliases in one rewrite.

        Exercises that already have stored aliases keep them, except that
        registry anchors always receive their generic and base-name aliases.
        Returns the number of records added.
        """
        records = await self._read()
        seeded = {r.exercise_id for r in records}
        index = {(r.exercise_id, r.normalized_alias) for r in records}
        added: list[AliasRecord] = []

        for exercise in exercises:
            if not isinstance(exercise, SystemExercise):
                continue
            texts = [] if exercise.id in seeded else generate_common(exercise.name)
            texts += anchor_aliases(exercise)
            for text in texts:
                normalized = normalize(text)
                if not normalized or (exercise.id, normalized) in index:
                    continue
                index.add((exercise.id, normalized))
                added.append(self._new_record(exercise.id, text, "system"))

        if added:
            await self._store(records + added)
            logger.info("Seeded %d system aliases", len(added))
        else:
            self._items = records
        return len(added)

    async def cleanup(self, existing_ids: set[str]) -> int:
        """Drop aliases of exercises not in existing_ids. Returns the number removed."""
        records = await self._read()
        kept = [r for r in records if r.exercise_id in existing_ids]
        removed = len(records) - len(kept)
        if removed:
            await self._store(kept)
        else:
            self._items = records
        return removed
