"""Canonical default exercises for generic queries, and specialty-variant penalties.

A query like "bench press" should land on the plain barbell lift, not on
"Smith Machine Bench Press". The registry names the defaults; specialty
modifiers mark the variants that only surface first when asked for.
"""

import re
from typing import Optional, Sequence

from ..catalog.schemas import Exercise, is_flagged_anchor
from .text import normalize, tokenize

ANCHOR_EXERCISES: dict[str, list[str]] = {
    "deadlift": ["Deadlift", "Barbell Deadlift"],
    "squat": ["Squat", "Barbell Squat", "Back Squat"],
    "bench press": ["Bench Press", "Barbell Bench Press"],
    "overhead press": ["Overhead Press", "Barbell Overhead Press", "OHP"],
    "row": ["Barbell Row", "Bent-Over Row"],
    "pulldown": ["Lat Pulldown", "Lat Pull-down"],
    "pull-up": ["Pull-up", "Pull Up", "Chin-up"],
}

SPECIALTY_MODIFIERS: tuple[str, ...] = (
    "band", "bands", "chain", "chains", "axle", "car", "reverse band",
    "rickshaw", "leverage", "trap bar", "hex bar", "safety bar",
    "cambered", "swiss bar", "football bar", "ez bar", "cable",
    "smith", "hack", "belt", "suit", "brief", "sling",
)

SPECIALTY_PENALTY = -50

_SEPARATORS = re.compile(r"[-_/]")
_MODIFIER_PATTERNS = tuple(
    re.compile(r"\b" + re.escape(modifier) + r"\b") for modifier in SPECIALTY_MODIFIERS
)


def _words(text: str) -> str:
    return normalize(_SEPARATORS.sub(" ", text))


def _key_applies(key: str, query: str) -> bool:
    """Registry key matches when the query names it, or the query is a run of its words."""
    key_words = _words(key)
    query_words = _words(query)
    if not query_words:
        return False
    if f" {key_words} " in f" {query_words} ":
        return True
    return set(tokenize(query_words)) <= set(tokenize(key_words))


def _has_modifier(text: str) -> bool:
    words = _words(text)
    return any(pattern.search(words) for pattern in _MODIFIER_PATTERNS)


def has_specialty_modifiers(name: str) -> bool:
    return _has_modifier(name)


def query_has_specialty_modifiers(query: str) -> bool:
    return _has_modifier(query)


def specialty_penalty(exercise: Exercise, query: str) -> int:
    """SPECIALTY_PENALTY for a specialty variant the query did not ask for, else 0."""
    if query_has_specialty_modifiers(query):
        return 0
    return SPECIALTY_PENALTY if has_specialty_modifiers(exercise.name) else 0


def base_name(name: str) -> str:
    """name with every specialty modifier removed."""
    base = _words(name)
    for pattern in _MODIFIER_PATTERNS:
        base = pattern.sub("", base)
    return normalize(base)


def is_registry_anchor(exercise: Exercise) -> bool:
    name = _words(exercise.name)
    return any(
        _words(anchor) == name for names in ANCHOR_EXERCISES.values() for anchor in names
    )


def anchor_aliases(exercise: Exercise) -> list[str]:
    """System alias texts an anchor should carry: its registry keys and its base name."""
    name = _words(exercise.name)
    aliases: list[str] = []
    for key, names in ANCHOR_EXERCISES.items():
        if any(_words(anchor) == name for anchor in names):
            if _words(key) != name:
                aliases.append(key)
            base = base_name(exercise.name)
            if base and base != name:
                aliases.append(base)
    return list(dict.fromkeys(aliases))


def find_anchor(query: str, exercises: Sequence[Exercise]) -> Optional[Exercise]:
    """Resolve a generic query to its canonical exercise in exercises, if any."""
    by_name = {_words(ex.name): ex for ex in reversed(exercises)}

    for key, names in ANCHOR_EXERCISES.items():
        if not _key_applies(key, query):
            continue
        for anchor in names:
            found = by_name.get(_words(anchor))
            if found is not None:
                return found

    target = _words(query)
    for exercise in exercises:
        if is_flagged_anchor(exercise) and base_name(exercise.name) == target:
            return exercise
    return None


def is_anchor_for_query(exercise: Exercise, query: str) -> bool:
    name = _words(exercise.name)
    for key, names in ANCHOR_EXERCISES.items():
        if _key_applies(key, query) and any(_words(anchor) == name for anchor in names):
            return True

    if is_flagged_anchor(exercise):
        return bool(query.strip()) and base_name(exercise.name) == _words(query)
    return False
