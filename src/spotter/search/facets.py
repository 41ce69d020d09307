"""Deterministic equipment labels and muscle buckets for exercises and queries."""

import re
from typing import Literal, NamedTuple, Optional, Sequence, Union

from ..catalog.schemas import Exercise, body_part_of, target_of

EquipmentLabel = Literal[
    "Barbell", "Dumbbell", "Machine", "Cable", "Bodyweight", "Kettlebell", "Smith", "Bands"
]
MuscleBucket = Literal["Legs", "Chest", "Back", "Shoulders", "Arms", "Core", "Full body"]

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

_EQUIPMENT_DIRECT: dict[str, EquipmentLabel] = {
    "barbell": "Barbell",
    "bb": "Barbell",
    "dumbbell": "Dumbbell",
    "db": "Dumbbell",
    "dumbell": "Dumbbell",
    "machine": "Machine",
    "cable": "Cable",
    "bodyweight": "Bodyweight",
    "body weight": "Bodyweight",
    "body only": "Bodyweight",
    "bodyonly": "Bodyweight",
    "bw": "Bodyweight",
    "kettlebell": "Kettlebell",
    "kb": "Kettlebell",
    "smith": "Smith",
    "smith machine": "Smith",
    "bands": "Bands",
    "resistance bands": "Bands",
    "band": "Bands",
}

# Checked in order; shoulders come before back so "lateral deltoid" is not read as "lat".
_BUCKET_TERMS: tuple[tuple[MuscleBucket, tuple[str, ...]], ...] = (
    ("Legs", ("quad", "quadricep", "hamstring", "glute", "calf", "calves",
              "adductor", "abductor", "thigh", "leg", "legs")),
    ("Chest", ("chest", "pectoral", "pec", "pecs")),
    ("Shoulders", ("delt", "deltoid", "anterior deltoid", "lateral deltoid",
                   "posterior deltoid", "shoulder", "shoulders")),
    ("Back", ("lat", "latissimus", "upper back", "lower back", "trap", "trapezius",
              "rhomboid", "erector", "spine", "spinae", "back")),
    ("Arms", ("bicep", "tricep", "forearm", "brachialis", "brachioradialis", "arm", "arms")),
    ("Core", ("ab", "abs", "abdominal", "oblique", "core", "serratus")),
    ("Full body", ("full body", "fullbody", "total body", "whole body")),
)

_QUERY_EQUIPMENT: dict[str, EquipmentLabel] = {
    "bb": "Barbell",
    "barbell": "Barbell",
    "bar": "Barbell",
    "db": "Dumbbell",
    "dumbbell": "Dumbbell",
    "dumbell": "Dumbbell",
    "machine": "Machine",
    "cable": "Cable",
    "bw": "Bodyweight",
    "bodyweight": "Bodyweight",
    "body": "Bodyweight",
    "kb": "Kettlebell",
    "kettlebell": "Kettlebell",
    "smith": "Smith",
    "bands": "Bands",
    "band": "Bands",
}

_QUERY_BUCKETS: dict[str, MuscleBucket] = {
    "leg": "Legs",
    "legs": "Legs",
    "quad": "Legs",
    "ham": "Legs",
    "glute": "Legs",
    "calf": "Legs",
    "thigh": "Legs",
    "chest": "Chest",
    "pec": "Chest",
    "pecs": "Chest",
    "back": "Back",
    "lat": "Back",
    "trap": "Back",
    "shoulder": "Shoulders",
    "shoulders": "Shoulders",
    "delt": "Shoulders",
    "arm": "Arms",
    "arms": "Arms",
    "bicep": "Arms",
    "tricep": "Arms",
    "core": "Core",
    "abs": "Core",
    "ab": "Core",
}


class QueryHints(NamedTuple):
    equipment: Optional[EquipmentLabel]
    bucket: Optional[MuscleBucket]


def _clean(text: str, replacement: str = "") -> str:
    text = _NON_ALNUM.sub(replacement, text.strip().lower())
    return _WHITESPACE.sub(" ", text).strip()


def _as_list(value: Union[str, Sequence[str], None]) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [v for v in value if isinstance(v, str)]


def normalize_equipment(equipment: Union[str, Sequence[str], None]) -> Optional[EquipmentLabel]:
    """Map a raw equipment value (first entry of a list) to a standard label."""
    values = _as_list(equipment)
    if not values:
        return None

    normalized = _clean(values[0])
    if normalized in _EQUIPMENT_DIRECT:
        return _EQUIPMENT_DIRECT[normalized]

    if "barbell" in normalized or "bar" in normalized:
        return "Barbell"
    if "dumb" in normalized:
        return "Dumbbell"
    if "machine" in normalized and "smith" not in normalized:
        return "Machine"
    if "cable" in normalized:
        return "Cable"
    if (
        ("body" in normalized and "only" in normalized)
        or ("body" in normalized and "weight" in normalized)
        or "bodyweight" in normalized
    ):
        return "Bodyweight"
    if "kettle" in normalized:
        return "Kettlebell"
    if "smith" in normalized:
        return "Smith"
    if "band" in normalized:
        return "Bands"
    return None


def derive_muscle_bucket(
    target: Union[str, Sequence[str], None] = None,
    body_part: Union[str, Sequence[str], None] = None,
    primary_muscles: Union[str, Sequence[str], None] = None,
) -> Optional[MuscleBucket]:
    """Pick the muscle bucket implied by target, body part and primary muscles together."""
    terms = [
        _clean(value, " ")
        for value in _as_list(target) + _as_list(body_part) + _as_list(primary_muscles)
    ]
    all_terms = " ".join(t for t in terms if t)
    if not all_terms:
        return None

    for bucket, keywords in _BUCKET_TERMS:
        if any(keyword in all_terms for keyword in keywords):
            return bucket
    return None


def extract_query_hints(query: str) -> QueryHints:
    """First equipment token and first bucket token in the query, if any."""
    tokens = _clean(query, " ").split()
    equipment = next((_QUERY_EQUIPMENT[t] for t in tokens if t in _QUERY_EQUIPMENT), None)
    bucket = next((_QUERY_BUCKETS[t] for t in tokens if t in _QUERY_BUCKETS), None)
    return QueryHints(equipment, bucket)


def equipment_label(exercise: Exercise) -> Optional[EquipmentLabel]:
    return normalize_equipment(exercise.equipment)


def muscle_bucket(exercise: Exercise) -> Optional[MuscleBucket]:
    return derive_muscle_bucket(
        target_of(exercise), body_part_of(exercise), exercise.primary_muscles or None
    )
