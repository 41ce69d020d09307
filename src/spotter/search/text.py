"""Text normalization and forgiving string matching for exercise search.

Scores are cheap signals in [0, 1]: exact 1.0, prefix 0.8, substring 0.5, then
the better of token overlap and a bounded edit distance. Edit distance tops out
at 0.6 - 0.2 = 0.4 for a single typo, so a typo never beats literal containment.
"""

import re

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]")

MAX_EDIT_DISTANCE = 3


def normalize(text: str) -> str:
    """Trim, lowercase and collapse interior whitespace."""
    return _WHITESPACE.sub(" ", text.strip().lower())


def simplify(text: str) -> str:
    """normalize() with punctuation removed, so "Pull-Up" and "pullup" compare equal."""
    return normalize(_PUNCTUATION.sub("", text))


def tokenize(text: str) -> list[str]:
    return text.split()


def edit_distance(a: str, b: str, max_distance: int = MAX_EDIT_DISTANCE) -> int:
    """Levenshtein distance, bounded.

    Returns max_distance + 1 when the lengths differ by more than max_distance
    or the distance exceeds it.
    """
    if abs(len(a) - len(b)) > max_distance:
        return max_distance + 1

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j], current[j - 1], previous[j - 1]) + 1)
        previous = current

    return min(previous[-1], max_distance + 1)


def _edit_distance_score(query: str, candidate: str) -> float:
    distance = edit_distance(query, candidate)
    if distance > MAX_EDIT_DISTANCE:
        return 0.0
    return max(0.0, 0.6 - 0.2 * distance)


def _token_overlap(query: str, candidate: str) -> float:
    q_tokens = set(tokenize(query))
    c_tokens = set(tokenize(candidate))
    if not q_tokens or not c_tokens:
        return 0.0
    return len(q_tokens & c_tokens) / len(q_tokens | c_tokens)


def match_score(query: str, candidate: str) -> float:
    """Score how well candidate matches query, in [0, 1]. Empty input scores 0."""
    q = simplify(query)
    c = simplify(candidate)
    if not q or not c:
        return 0.0

    if c == q:
        return 1.0
    if c.startswith(q):
        return 0.8
    if q in c:
        return 0.5

    return max(_token_overlap(q, c), _edit_distance_score(q, c))


def alias_match_score(query: str, aliases) -> float:
    """Best match_score of query against any alias."""
    return max((match_score(query, alias) for alias in aliases), default=0.0)
