"""Generated spelling variants that widen what an exercise name matches."""

import re

from ..catalog.schemas import Exercise
from .text import normalize

# (pattern, replacement) pairs applied independently to the normalized name.
_VARIANTS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"pull[\s-]*down"), "pulldown"),
    (re.compile(r"pull[\s-]*down"), "pull down"),
    (re.compile(r"pull[\s-]*up"), "pullup"),
    (re.compile(r"pull[\s-]*up"), "pull up"),
    (re.compile(r"pull[\s-]*up"), "pull-up"),
    (re.compile(r"romanian\s+deadlift"), "rdl"),
    (re.compile(r"\brdl\b"), "romanian deadlift"),
    (re.compile(r"overhead\s+press"), "ohp"),
    (re.compile(r"\bohp\b"), "overhead press"),
    (re.compile(r"dumbbell"), "db"),
    (re.compile(r"\bdb\b"), "dumbbell"),
    (re.compile(r"barbell"), "bb"),
    (re.compile(r"\bbb\b"), "barbell"),
    (re.compile(r"sit[\s-]*up"), "situp"),
    (re.compile(r"sit[\s-]*up"), "sit up"),
    (re.compile(r"sit[\s-]*up"), "sit-up"),
)


def generate_search_aliases(name: str) -> list[str]:
    """Spelling variants of name ("Barbell Row" -> ["bb row"]), without duplicates."""
    normalized = normalize(name)
    aliases: list[str] = []
    for pattern, replacement in _VARIANTS:
        variant = pattern.sub(replacement, normalized)
        if variant != normalized and variant not in aliases:
            aliases.append(variant)
    return aliases


def build_search_text(exercise: Exercise) -> str:
    """Lowercased name, declared aliases and generated variants joined by spaces."""
    parts = [exercise.name, *exercise.aliases, *generate_search_aliases(exercise.name)]
    return " ".join(parts).lower()
