"""Immutable view of the merged System + User exercise catalog."""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..search.text import normalize
from .schemas import Exercise, SystemExercise, UserExercise


class CatalogSnapshot(BaseModel):
    """The catalog as seen by one search pass.

    Adding a user exercise produces a new snapshot; a snapshot is never
    mutated in place.
    """

    model_config = ConfigDict(frozen=True)

    system: Tuple[SystemExercise, ...] = ()
    user: Tuple[UserExercise, ...] = ()

    def all_exercises(self) -> list[Exercise]:
        """System and User exercises merged by normalized display name.

        A User exercise replaces a same-named System exercise only when it
        carries aliases of its own. Recomputed on every call.
        """
        merged: dict[str, Exercise] = {}
        for exercise in self.system:
            merged.setdefault(normalize(exercise.name), exercise)

        for exercise in self.user:
            key = normalize(exercise.name)
            if key not in merged or exercise.aliases:
                merged[key] = exercise

        return list(merged.values())

    def get(self, exercise_id: str) -> Optional[Exercise]:
        for exercise in self.all_exercises():
            if exercise.id == exercise_id:
                return exercise
        return None

    def find_by_name(self, name: str) -> Optional[Exercise]:
        key = normalize(name)
        for exercise in self.all_exercises():
            if normalize(exercise.name) == key:
                return exercise
        return None

    def exercise_ids(self) -> set[str]:
        """Ids of every System and User exercise, including merged-away duplicates."""
        return {ex.id for ex in self.system} | {ex.id for ex in self.user}

    def with_user_exercise(self, exercise: UserExercise) -> "CatalogSnapshot":
        return self.model_copy(update={"user": self.user + (exercise,)})
