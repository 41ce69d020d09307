"""Precision search: a strict best tier and a looser related tier.

The best tier is an ordered ladder of (reason, score, predicate) rungs; an
exercise takes the first rung it satisfies. Token rungs compare whole words
split on spaces and hyphens (a query token must equal or begin a word), so
"bb" never matches inside "dumbbell" while "bar" still finds "EZ-Bar Curl".
"""

import re
from typing import Callable, NamedTuple, Sequence

from ..catalog.schemas import Exercise, body_part_of, target_of
from .expansions import build_search_text, generate_search_aliases
from .facets import QueryHints, equipment_label, extract_query_hints, muscle_bucket
from .schemas import BestMatch, BestReason, PrecisionResults, RelatedMatch, RelatedReason
from .text import normalize, tokenize

BEST_TIER_THRESHOLD = 5
RELATED_CAP = 30

_WORD_SEPARATORS = re.compile(r"[\s\-_/]+")


class _Candidate(NamedTuple):
    exercise: Exercise
    name: str
    name_words: list[str]
    alias_texts: list[str]
    search_words: list[str]


class _Query(NamedTuple):
    text: str
    tokens: list[str]
    hints: QueryHints


def _words(text: str) -> list[str]:
    """Words split on whitespace, hyphens, underscores and slashes."""
    return [w for w in _WORD_SEPARATORS.split(text) if w]


def _prepare(exercise: Exercise) -> _Candidate:
    name = normalize(exercise.name)
    alias_texts = [normalize(a) for a in exercise.aliases] + generate_search_aliases(exercise.name)
    return _Candidate(exercise, name, _words(name), alias_texts, _words(build_search_text(exercise)))


def _covers(token: str, words: Sequence[str]) -> bool:
    return any(word.startswith(token) for word in words)


def _all_covered(tokens: Sequence[str], words: Sequence[str]) -> bool:
    parts = [part for token in tokens for part in _words(token)]
    return bool(parts) and all(_covers(part, words) for part in parts)


def _starts_with_rest_inside(c: _Candidate, q: _Query) -> bool:
    if not q.tokens or not c.name.startswith(q.tokens[0]):
        return False
    return all(token in c.name for token in q.tokens[1:])


BEST_LADDER: tuple[tuple[BestReason, int, Callable[[_Candidate, _Query], bool]], ...] = (
    ("exact", 1000, lambda c, q: c.name == q.text),
    ("contains", 900, lambda c, q: q.text in c.name),
    ("alias-contains", 850, lambda c, q: any(q.text in alias for alias in c.alias_texts)),
    ("token-set-name", 800, lambda c, q: _all_covered(q.tokens, c.name_words)),
    ("token-set-aliases", 780, lambda c, q: _all_covered(q.tokens, c.search_words)),
    ("starts-with", 700, _starts_with_rest_inside),
)


def _best_match(c: _Candidate, q: _Query) -> BestMatch | None:
    for reason, score, predicate in BEST_LADDER:
        if predicate(c, q):
            return BestMatch(exercise=c.exercise, score=score, reason=reason)
    return None


def _related_match(c: _Candidate, q: _Query) -> RelatedMatch | None:
    signals: list[tuple[int, RelatedReason]] = []

    if any(token in c.name for token in q.tokens):
        signals.append((500, "name-partial"))

    equipment = equipment_label(c.exercise)
    if equipment and q.hints.equipment == equipment:
        signals.append((400, "equipment"))
    elif equipment and equipment.lower() in q.text:
        signals.append((350, "equipment"))

    bucket = muscle_bucket(c.exercise)
    if bucket and q.hints.bucket == bucket:
        signals.append((300, "bucket"))
    elif bucket and bucket.lower() in q.text:
        signals.append((250, "bucket"))

    target = normalize(target_of(c.exercise) or "")
    if target and any(token in target for token in q.tokens):
        signals.append((200, "target"))
    body_part = normalize(body_part_of(c.exercise) or "")
    if body_part and any(token in body_part for token in q.tokens):
        signals.append((200, "bodypart"))

    if not signals:
        return None
    score, reason = max(signals, key=lambda signal: signal[0])
    return RelatedMatch(exercise=c.exercise, score=score, reason=reason)


def precision_search(exercises: Sequence[Exercise], query: str) -> PrecisionResults:
    """Rank exercises for a specific query.

    The related tier is only computed when the best tier is thin, and is
    capped only when the best tier has at least one result.
    """
    text = normalize(query)
    if not text:
        return PrecisionResults()
    q = _Query(text, tokenize(text), extract_query_hints(query))
    candidates = [_prepare(exercise) for exercise in exercises]

    best: list[BestMatch] = []
    for candidate in candidates:
        match = _best_match(candidate, q)
        if match is not None:
            best.append(match)

    best.sort(
        key=lambda m: (
            -m.score,
            len(tokenize(normalize(m.exercise.name))),
            normalize(m.exercise.name),
        )
    )

    related: list[RelatedMatch] = []
    if len(best) < BEST_TIER_THRESHOLD:
        best_ids = {m.exercise.id for m in best}
        for candidate in candidates:
            if candidate.exercise.id in best_ids:
                continue
            match = _related_match(candidate, q)
            if match is not None:
                related.append(match)

        related.sort(key=lambda m: (-m.score, normalize(m.exercise.name)))
        if best:
            related = related[:RELATED_CAP]

    return PrecisionResults(best=best, related=related)
