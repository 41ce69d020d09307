"""Errors raised to callers for misuse of the catalog and learning API.

Storage and catalog-source failures never surface here; they are logged and
recovered where they happen.
"""


class SpotterError(Exception):
    """Base class for Spotter errors."""


class InvalidExerciseName(SpotterError, ValueError):
    """An exercise name or alias text is empty after normalization."""


class DuplicateExercise(SpotterError, ValueError):
    """The user catalog already holds an exercise with this normalized name."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Exercise "{name}" already exists')
        self.name = name


class UnknownExercise(SpotterError, ValueError):
    """An exercise id is not part of the current catalog snapshot."""

    def __init__(self, exercise_id: str) -> None:
        super().__init__(f"Unknown exercise id: {exercise_id}")
        self.exercise_id = exercise_id
