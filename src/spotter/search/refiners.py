"""Equipment and muscle-bucket refiners, and optional result grouping."""

import math
from collections import Counter
from typing import Collection, Optional, Sequence, TypeVar

from pydantic import BaseModel

from .facets import equipment_label, extract_query_hints, muscle_bucket
from .schemas import DiscoveryMatch, Refiner, ResultGroup

MIN_RESULTS_FOR_REFINERS = 20
REFINER_SHARE = 0.3
MAX_REFINERS_PER_TYPE = 2

MAX_GROUPS = 6
MIN_GROUP_SIZE = 2

# Any result model carrying an `exercise` field.
R = TypeVar("R", bound=BaseModel)


def _top(counts: Counter, kind: str, threshold: int) -> list[Refiner]:
    common = [(label, count) for label, count in counts.most_common() if count >= threshold]
    return [
        Refiner(type=kind, label=label, count=count)
        for label, count in common[:MAX_REFINERS_PER_TYPE]
    ]


def facet_refiners(results: Sequence[R]) -> list[Refiner]:
    """Facets that would keep at least 30% of results, most common first."""
    equipment = Counter(
        label for label in (equipment_label(r.exercise) for r in results) if label
    )
    buckets = Counter(bucket for bucket in (muscle_bucket(r.exercise) for r in results) if bucket)

    threshold = math.ceil(len(results) * REFINER_SHARE)
    return _top(equipment, "equipment", threshold) + _top(buckets, "bucket", threshold)


def generate_refiners(results: Sequence[R]) -> list[Refiner]:
    """facet_refiners(), suppressed entirely below 20 results."""
    if len(results) < MIN_RESULTS_FOR_REFINERS:
        return []
    return facet_refiners(results)


def apply_refiners(
    results: Sequence[R],
    equipment: Collection[str] = (),
    buckets: Collection[str] = (),
) -> list[R]:
    """Keep results matching an active equipment label and an active bucket."""
    if not equipment and not buckets:
        return list(results)

    kept = []
    for result in results:
        if equipment and equipment_label(result.exercise) not in equipment:
            continue
        if buckets and muscle_bucket(result.exercise) not in buckets:
            continue
        kept.append(result)
    return kept


def group_results(
    results: Sequence[DiscoveryMatch], query: str
) -> Optional[list[ResultGroup]]:
    """Group by bucket for an equipment query, or by equipment for a bucket query.

    Returns None unless grouping gives 2 to 6 groups of at least 2 results.
    """
    hints = extract_query_hints(query)
    if hints.equipment and not hints.bucket:
        facet = muscle_bucket
    elif hints.bucket and not hints.equipment:
        facet = equipment_label
    else:
        return None

    groups: dict[str, list[DiscoveryMatch]] = {}
    for result in results:
        groups.setdefault(facet(result.exercise) or "Other", []).append(result)

    if len(groups) > MAX_GROUPS:
        return None
    kept = [
        ResultGroup(label=label, results=members)
        for label, members in groups.items()
        if len(members) >= MIN_GROUP_SIZE
    ]
    return kept if len(kept) > 1 else None
