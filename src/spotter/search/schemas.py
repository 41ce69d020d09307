"""Result models returned by the search pipeline."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..catalog.schemas import Exercise

SearchIntent = Literal["precision", "discovery"]

BestReason = Literal[
    "exact", "contains", "alias-contains", "token-set-name", "token-set-aliases", "starts-with"
]
RelatedReason = Literal["name-partial", "equipment", "bucket", "target", "bodypart"]


class BestMatch(BaseModel):
    exercise: Exercise
    score: int
    reason: BestReason


class RelatedMatch(BaseModel):
    exercise: Exercise
    score: int
    reason: RelatedReason


class PrecisionResults(BaseModel):
    best: List[BestMatch] = Field(default_factory=list)
    related: List[RelatedMatch] = Field(default_factory=list)


class DiscoveryMatch(BaseModel):
    exercise: Exercise
    score: int
    tags: List[str] = Field(default_factory=list, description="Distinct signals that fired")


class Refiner(BaseModel):
    type: Literal["equipment", "bucket"]
    label: str
    count: int


class ResultGroup(BaseModel):
    label: str
    results: List[DiscoveryMatch]


class PrecisionResult(BaseModel):
    intent: Literal["precision"] = "precision"
    best: List[BestMatch] = Field(default_factory=list)
    related: List[RelatedMatch] = Field(default_factory=list)


class DiscoveryResult(BaseModel):
    intent: Literal["discovery"] = "discovery"
    results: List[DiscoveryMatch] = Field(default_factory=list)


UnifiedResult = Union[PrecisionResult, DiscoveryResult]


class ScoredExercise(BaseModel):
    """A tiered search entry with the score it was ranked by."""

    exercise: Exercise
    score: float
    history: float = Field(default=0.0, description="Usage and affinity, for previously picked first")
    is_anchor: bool = False


class TieredResults(BaseModel):
    """Matches (tier1) and concept-related suggestions (tier2)."""

    tier1: List[ScoredExercise] = Field(default_factory=list)
    tier2: List[ScoredExercise] = Field(default_factory=list)

    def matches(self) -> List[Exercise]:
        return [entry.exercise for entry in self.tier1]

    def related(self) -> List[Exercise]:
        return [entry.exercise for entry in self.tier2]


class BrowseResult(BaseModel):
    """A unified search result with the refiners and grouping offered for it."""

    result: UnifiedResult = Field(discriminator="intent")
    refiners: List[Refiner] = Field(default_factory=list)
    groups: Optional[List[ResultGroup]] = None
