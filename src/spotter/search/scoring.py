"""Familiarity and semantic scoring.

Familiarity blends four [0, 1] signals with fixed weights so scores compare
across calls. Semantic scoring rewards concept overlap for exercises whose
text does not match the query at all.
"""

from typing import Optional

from ..catalog.schemas import Exercise, SystemExercise
from ..signals.affinity import AffinityStore
from ..signals.aliases import AliasStore
from ..signals.usage import UsageStore
from .concepts import QueryConcepts
from .text import alias_match_score, match_score, normalize

USAGE_WEIGHT = 0.4
CONTEXT_WEIGHT = 0.2
AFFINITY_WEIGHT = 0.3
TEXT_WEIGHT = 0.1

ANCHOR_BOOST = 0.5

ANCHOR_PATTERNS = (
    "bench press", "squat", "deadlift", "overhead press", "row", "pull", "curl",
    "extension", "press", "raise", "fly", "pulldown", "pullup", "pull-up", "dip",
    "push-up", "pushup", "lunge", "leg press", "crunch", "plank",
)


class FamiliarityScorer:
    """Scores an exercise by how familiar it is to this user for this query."""

    def __init__(self, aliases: AliasStore, usage: UsageStore, affinity: AffinityStore) -> None:
        self.aliases = aliases
        self.usage = usage
        self.affinity = affinity

    def usage_score(self, exercise: Exercise) -> float:
        return self.usage.usage_score(exercise.id)

    def context_score(self, exercise: Exercise, context_id: Optional[str]) -> float:
        return self.usage.context_score(exercise.id, context_id)

    def affinity_score(self, exercise: Exercise, query: str) -> float:
        return self.affinity.affinity_score(query, exercise.id)

    def text_score(self, exercise: Exercise, query: str) -> float:
        """Best of name match and match against stored plus declared aliases."""
        aliases = self.aliases.alias_texts_for(exercise.id) + list(exercise.aliases)
        return max(match_score(query, exercise.name), alias_match_score(query, aliases))

    def total_score(
        self, exercise: Exercise, query: str, context_id: Optional[str] = None
    ) -> float:
        return (
            USAGE_WEIGHT * self.usage_score(exercise)
            + CONTEXT_WEIGHT * self.context_score(exercise, context_id)
            + AFFINITY_WEIGHT * self.affinity_score(exercise, query)
            + TEXT_WEIGHT * self.text_score(exercise, query)
        )

    def history_score(self, exercise: Exercise, query: str) -> float:
        """Personal history only, used to put previously picked exercises first."""
        return (
            self.usage.raw_usage_score(exercise.id) * 10
            + self.affinity_score(exercise, query) * 5
        )


def _overlap(concepts: list[str], values: list[str]) -> bool:
    return any(c in v or v in c for c in concepts for v in values if v)


def semantic_score(exercise: Exercise, concepts: QueryConcepts) -> int:
    """+3 primary muscle, +1 secondary, +2 equipment, +1 each force, mechanic, category."""
    score = 0
    muscles = [normalize(m) for m in concepts.muscles]
    equipment = [normalize(e) for e in concepts.equipment]

    if muscles and _overlap(muscles, [normalize(m) for m in exercise.primary_muscles]):
        score += 3
    if muscles and _overlap(muscles, [normalize(m) for m in exercise.secondary_muscles]):
        score += 1
    if equipment and _overlap(equipment, [normalize(e) for e in exercise.equipment]):
        score += 2

    for wanted, actual in (
        (concepts.force, exercise.force),
        (concepts.mechanic, exercise.mechanic),
        (concepts.category, exercise.category),
    ):
        if wanted and actual and normalize(wanted) == normalize(actual):
            score += 1
    return score


def is_anchor_exercise(exercise: Exercise) -> bool:
    """Common lifts by name pattern, plus compound System exercises."""
    name = normalize(exercise.name)
    if any(pattern in name for pattern in ANCHOR_PATTERNS):
        return True
    return isinstance(exercise, SystemExercise) and exercise.mechanic == "compound"


def anchor_boost(exercise: Exercise) -> float:
    return ANCHOR_BOOST if is_anchor_exercise(exercise) else 0.0
