"""One query entry point: intent detection, then precision or discovery search."""

from typing import Collection, Sequence

from ..catalog.schemas import Exercise
from . import refiners
from .discovery import discovery_search
from .intent import detect_intent
from .precision import precision_search
from .schemas import DiscoveryResult, PrecisionResult, Refiner, UnifiedResult

DISCOVERY_CAP = 80


def search(exercises: Sequence[Exercise], query: str) -> UnifiedResult:
    if detect_intent(query) == "precision":
        found = precision_search(exercises, query)
        return PrecisionResult(best=found.best, related=found.related)
    return DiscoveryResult(results=discovery_search(exercises, query)[:DISCOVERY_CAP])


def apply_refiners(
    result: UnifiedResult,
    equipment: Collection[str] = (),
    buckets: Collection[str] = (),
) -> UnifiedResult:
    """Filter a unified result. The precision best tier is never filtered."""
    if isinstance(result, PrecisionResult):
        return PrecisionResult(
            best=result.best,
            related=refiners.apply_refiners(result.related, equipment, buckets),
        )
    return DiscoveryResult(results=refiners.apply_refiners(result.results, equipment, buckets))


def generate_refiners(result: UnifiedResult) -> list[Refiner]:
    """Refiners for the related tier (precision) or all results (discovery).

    Offered only when the whole result holds at least 20 exercises.
    """
    if isinstance(result, PrecisionResult):
        if len(result.best) + len(result.related) < refiners.MIN_RESULTS_FOR_REFINERS:
            return []
        return refiners.facet_refiners(result.related)
    return refiners.generate_refiners(result.results)
