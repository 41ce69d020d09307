"""Infer muscle, equipment, force, mechanic and category concepts from a free-text query."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .text import simplify, tokenize

# Partial tokens shorter than this only match a synonym exactly.
MIN_PARTIAL_LENGTH = 3

MUSCLE_SYNONYMS: dict[str, list[str]] = {
    # Chest
    "chest": ["chest", "pectorals", "pecs", "pectoral"],
    "pectorals": ["chest", "pectorals", "pecs", "pectoral"],
    "pecs": ["chest", "pectorals", "pecs", "pectoral"],
    "pectoral": ["chest", "pectorals", "pecs", "pectoral"],
    # Back
    "back": ["lats", "latissimus", "back", "upper back", "lower back", "traps", "trapezius", "rhomboids"],
    "lats": ["lats", "latissimus", "back"],
    "latissimus": ["lats", "latissimus", "back"],
    "traps": ["traps", "trapezius", "back"],
    "trapezius": ["traps", "trapezius", "back"],
    # Shoulders
    "shoulders": ["shoulders", "delts", "deltoids", "deltoid"],
    "delts": ["shoulders", "delts", "deltoids", "deltoid"],
    "deltoids": ["shoulders", "delts", "deltoids", "deltoid"],
    "deltoid": ["shoulders", "delts", "deltoids", "deltoid"],
    # Arms
    "arms": ["biceps", "triceps", "forearms", "arms"],
    "biceps": ["biceps", "bicep"],
    "bicep": ["biceps", "bicep"],
    "triceps": ["triceps", "tricep"],
    "tricep": ["triceps", "tricep"],
    "forearms": ["forearms", "forearm"],
    # Legs
    "legs": ["quadriceps", "quads", "hamstrings", "hamstring", "glutes", "glute", "calves", "calf", "legs"],
    "quads": ["quadriceps", "quads", "legs"],
    "quadriceps": ["quadriceps", "quads", "legs"],
    "hamstrings": ["hamstrings", "hamstring", "legs"],
    "hamstring": ["hamstrings", "hamstring", "legs"],
    "glutes": ["glutes", "glute", "legs"],
    "glute": ["glutes", "glute", "legs"],
    "calves": ["calves", "calf", "legs"],
    "calf": ["calves", "calf", "legs"],
    # Core
    "core": ["abdominals", "abs", "core", "obliques", "oblique"],
    "abs": ["abdominals", "abs", "core"],
    "abdominals": ["abdominals", "abs", "core"],
    "obliques": ["obliques", "oblique", "core"],
    "oblique": ["obliques", "oblique", "core"],
}

EQUIPMENT_SYNONYMS: dict[str, list[str]] = {
    "barbell": ["barbell", "bb", "bar"],
    "dumbbell": ["dumbbell", "db", "dumbbells"],
    "cable": ["cable", "cables"],
    "machine": ["machine", "machines"],
    "body weight": ["body weight", "bodyweight", "bw", "body only", "no equipment"],
    "bodyweight": ["body weight", "bodyweight", "bw", "body only", "no equipment"],
    "bw": ["body weight", "bodyweight", "bw", "body only", "no equipment"],
    "kettlebell": ["kettlebell", "kb", "kettlebells"],
    "smith": ["smith", "smith machine"],
}

FORCE_SYNONYMS: dict[str, str] = {
    "push": "push",
    "pushing": "push",
    "press": "push",
    "pressing": "push",
    "pull": "pull",
    "pulling": "pull",
    "row": "pull",
    "rowing": "pull",
    "curl": "pull",
    "curling": "pull",
}

MECHANIC_SYNONYMS: dict[str, str] = {
    "compound": "compound",
    "isolation": "isolation",
    "isolated": "isolation",
}

CATEGORY_SYNONYMS: dict[str, str] = {
    "strength": "strength",
    "stretching": "stretching",
    "cardio": "cardio",
    "olympic": "olympic",
    "strongman": "strongman",
}


class QueryConcepts(BaseModel):
    """Canonical concepts a query implies."""

    muscles: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    force: Optional[str] = None
    mechanic: Optional[str] = None
    category: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.muscles or self.equipment or self.force or self.mechanic or self.category)


def _overlaps(token: str, synonym: str) -> bool:
    if token == synonym or synonym in token:
        return True
    return len(token) >= MIN_PARTIAL_LENGTH and token in synonym


def _first_hit(terms: list[str], table: dict[str, str]) -> Optional[str]:
    for term in terms:
        for synonym, canonical in table.items():
            if _overlaps(term, synonym):
                return canonical
    return None


def infer_concepts(query: str) -> QueryConcepts:
    """Map query tokens and the whole query onto the five synonym tables.

    Muscles and equipment accumulate every hit in table order; force,
    mechanic and category keep the first hit.
    """
    normalized = simplify(query)
    tokens = tokenize(normalized)
    if not tokens:
        return QueryConcepts()

    muscles: dict[str, None] = {}
    equipment: dict[str, None] = {}

    for token in tokens:
        for synonym, canonical in MUSCLE_SYNONYMS.items():
            if _overlaps(token, synonym):
                muscles.update(dict.fromkeys(canonical))
        for synonym, canonical in EQUIPMENT_SYNONYMS.items():
            if token == synonym or token in canonical:
                equipment.update(dict.fromkeys(canonical))

    # Multi-word synonyms ("upper back", "body weight") only show up in the full query.
    for synonym, canonical in MUSCLE_SYNONYMS.items():
        if synonym in normalized:
            muscles.update(dict.fromkeys(canonical))
    for synonym, canonical in EQUIPMENT_SYNONYMS.items():
        if synonym in normalized:
            equipment.update(dict.fromkeys(canonical))

    terms = tokens + [normalized] if len(tokens) > 1 else tokens
    return QueryConcepts(
        muscles=list(muscles),
        equipment=list(equipment),
        force=_first_hit(terms, FORCE_SYNONYMS),
        mechanic=_first_hit(terms, MECHANIC_SYNONYMS),
        category=_first_hit(terms, CATEGORY_SYNONYMS),
    )
