"""Classify a query as precision (a specific movement) or discovery (browsing)."""

import re

from .schemas import SearchIntent

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

SPECIFIC_KEYWORDS = (
    "pulldown", "pull-down", "pull down", "pullup", "pull-up", "pull up",
    "row", "press", "squat", "deadlift", "curl", "extension", "fly", "raise",
    "rdl", "hinge", "lunge", "dip", "crunch", "situp", "sit-up", "sit up",
    "shrug", "calf", "trap", "pullover", "kickback",
)

NUMBER_KEYWORDS = ("incline", "decline", "45", "30", "15", "90", "180")


def _normalize_for_intent(query: str) -> str:
    return _WHITESPACE.sub(" ", _NON_ALNUM.sub(" ", query.strip().lower())).strip()


def detect_intent(query: str) -> SearchIntent:
    normalized = _normalize_for_intent(query)
    tokens = normalized.split()
    if not tokens:
        return "discovery"

    if len(tokens) >= 2:
        return "precision"
    if any(keyword in normalized for keyword in SPECIFIC_KEYWORDS):
        return "precision"
    if any(keyword in normalized for keyword in NUMBER_KEYWORDS):
        return "precision"
    # A lone bucket, equipment or any other single word browses.
    return "discovery"
