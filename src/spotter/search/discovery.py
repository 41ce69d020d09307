"""Discovery search: broad single-tier recall for browsing queries."""

from typing import Sequence

from ..catalog.schemas import Exercise, body_part_of, target_of
from .facets import equipment_label, extract_query_hints, muscle_bucket
from .schemas import DiscoveryMatch
from .text import normalize, tokenize


def _name_signals(name: str, query: str, tokens: list[str]) -> list[tuple[int, str]]:
    if name == query:
        return [(1000, "name:exact")]
    if name.startswith(query):
        return [(800, "name:starts")]

    signals = []
    for token in tokens:
        if name.startswith(token):
            signals.append((700, f"name:starts:{token}"))
        elif token in name:
            signals.append((500, f"name:includes:{token}"))
    return signals


def _alias_signals(aliases: Sequence[str], query: str) -> list[tuple[int, str]]:
    signals = []
    for alias in (normalize(a) for a in aliases):
        if alias == query:
            return signals + [(900, "alias:exact")]
        if alias.startswith(query):
            signals.append((650, "alias:starts"))
        elif query in alias:
            signals.append((450, "alias:includes"))
    return signals


def _score(exercise: Exercise, query: str, tokens: list[str], hints) -> DiscoveryMatch:
    name = normalize(exercise.name)
    signals = _name_signals(name, query, tokens) + _alias_signals(exercise.aliases, query)

    equipment = equipment_label(exercise)
    if equipment:
        label = equipment.lower()
        if label in query or query in label:
            signals.append((400, f"equipment:{equipment}"))
        if hints.equipment == equipment:
            signals.append((350, f"equipment:hint:{equipment}"))

    bucket = muscle_bucket(exercise)
    if bucket:
        label = bucket.lower()
        if label in query or query in label:
            signals.append((300, f"bucket:{bucket}"))
        if hints.bucket == bucket:
            signals.append((250, f"bucket:hint:{bucket}"))

    for field, value in (("target", target_of(exercise)), ("bodyPart", body_part_of(exercise))):
        text = normalize(value or "")
        if not text:
            continue
        for token in tokens:
            if token in text:
                signals.append((200, f"{field}:{token}"))

    score = max((s for s, _ in signals), default=0)
    tags = list(dict.fromkeys(tag for _, tag in signals))
    return DiscoveryMatch(exercise=exercise, score=score, tags=tags)


def discovery_search(exercises: Sequence[Exercise], query: str) -> list[DiscoveryMatch]:
    """Every exercise with any signal, strongest signal first.

    Ties go to the exercise with more distinct signals, then alphabetical.
    An empty query returns every exercise unscored in catalog order.
    """
    text = normalize(query)
    if not text:
        return [DiscoveryMatch(exercise=exercise, score=0) for exercise in exercises]

    tokens = tokenize(text)
    hints = extract_query_hints(query)
    matches = [_score(exercise, text, tokens, hints) for exercise in exercises]
    matches = [m for m in matches if m.score > 0]
    matches.sort(key=lambda m: (-m.score, -len(m.tags), normalize(m.exercise.name)))
    return matches
