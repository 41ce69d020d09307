"""User-created exercises, persisted as one collection."""

import json
import logging
import uuid
from typing import Any, List

from pydantic import TypeAdapter, ValidationError

from ..errors import DuplicateExercise, InvalidExerciseName
from ..search.text import normalize
from ..signals.base import PersistedCollection
from .schemas import UserExercise

logger = logging.getLogger(__name__)

USER_EXERCISES_KEY = "user_exercises_v1"

_entry_adapter = TypeAdapter(UserExercise)


class UserExerciseStore(PersistedCollection[List[UserExercise]]):
    """User exercises, unique by normalized name."""

    key = USER_EXERCISES_KEY

    def __init__(self, db=None, clock=None) -> None:
        super().__init__(TypeAdapter(List[UserExercise]), list, db=db, clock=clock)

    @property
    def exercises(self) -> list[UserExercise]:
        return list(self._items)

    def _decode(self, payload: str) -> list[UserExercise]:
        """Keep every valid entry; one bad entry does not discard the rest."""
        entries: Any = json.loads(payload)
        if not isinstance(entries, list):
            raise ValueError(f"{self.key} is not a list")

        exercises = []
        for entry in entries:
            try:
                exercises.append(_entry_adapter.validate_python(entry))
            except ValidationError as e:
                logger.warning("Dropping invalid user exercise %r: %s", entry, e)
        return exercises

    async def add(self, name: str) -> UserExercise:
        """Create and persist a user exercise.

        Raises InvalidExerciseName for a blank name and DuplicateExercise when
        a user exercise with the same normalized name exists.
        """
        trimmed = name.strip()
        if not trimmed:
            raise InvalidExerciseName("Exercise name cannot be empty")

        exercises = await self._read()
        key = normalize(trimmed)
        if any(normalize(ex.name) == key for ex in exercises):
            self._items = exercises
            raise DuplicateExercise(trimmed)

        exercise = UserExercise(
            id=f"usr:{uuid.uuid4()}", name=trimmed, created_at=self.now()
        )
        await self._store(exercises + [exercise])
        logger.info("Created user exercise %s (%s)", exercise.name, exercise.id)
        return exercise

    async def cleanup(self, existing_ids: set[str]) -> int:
        exercises = await self._read()
        kept = [ex for ex in exercises if ex.id in existing_ids]
        removed = len(exercises) - len(kept)
        if removed:
            await self._store(kept)
        else:
            self._items = exercises
        return removed
