"""Familiarity-ranked matches with a semantic related tier.

Exercises whose text matches the query are ranked by personal history,
then anchor status, then familiarity score. Everything else can only show up
as a related suggestion through concept overlap, and only when the matches
are weak.
"""

from typing import Optional, Sequence

from ..catalog.schemas import Exercise
from ..signals.aliases import AliasStore
from .anchors import find_anchor, is_anchor_for_query, specialty_penalty
from .concepts import infer_concepts
from .schemas import ScoredExercise, TieredResults
from .scoring import FamiliarityScorer, anchor_boost, is_anchor_exercise, semantic_score
from .text import normalize, tokenize

MATCHES_CAP = 15
RELATED_CAP = 5
WEAK_MATCH_COUNT = 5

RESOLVED_ANCHOR_BOOST = 100
QUERY_ANCHOR_BOOST = 50


def has_text_match(exercise: Exercise, query: str, aliases: Optional[AliasStore] = None) -> bool:
    """Broad text predicate deciding whether an exercise is a match or a related candidate."""
    name = normalize(exercise.name)
    if query in name:
        return True

    name_tokens = tokenize(name)
    query_tokens = tokenize(query)
    if query_tokens and all(
        any(nt in qt or qt in nt for nt in name_tokens) for qt in query_tokens
    ):
        return True

    for alias in (normalize(a) for a in exercise.aliases):
        if alias and (query in alias or alias in query):
            return True

    if aliases is not None:
        for record in aliases.aliases_for(exercise.id):
            if query in record.normalized_alias:
                return True
    return False


def search_with_intent(
    exercises: Sequence[Exercise],
    query: str,
    scorer: FamiliarityScorer,
    context_id: Optional[str] = None,
) -> TieredResults:
    text = normalize(query)

    if not text:
        ranked = [
            ScoredExercise(
                exercise=exercise,
                score=scorer.total_score(exercise, "", context_id),
                history=scorer.history_score(exercise, ""),
            )
            for exercise in exercises
        ]
        ranked.sort(key=lambda e: (-e.score, normalize(e.exercise.name)))
        return TieredResults(tier1=ranked)

    concepts = infer_concepts(text)
    anchor = find_anchor(text, exercises)

    matches: list[ScoredExercise] = []
    related: list[ScoredExercise] = []
    for exercise in exercises:
        if has_text_match(exercise, text, scorer.aliases):
            score = scorer.total_score(exercise, text, context_id)
            is_resolved = anchor is not None and exercise.id == anchor.id
            if is_resolved:
                score += RESOLVED_ANCHOR_BOOST
            elif is_anchor_for_query(exercise, text):
                score += QUERY_ANCHOR_BOOST
            score += specialty_penalty(exercise, text)
            matches.append(
                ScoredExercise(
                    exercise=exercise,
                    score=score,
                    history=scorer.history_score(exercise, text),
                    is_anchor=is_resolved,
                )
            )
        else:
            semantic = semantic_score(exercise, concepts)
            if semantic > 0:
                related.append(
                    ScoredExercise(
                        exercise=exercise,
                        score=semantic + anchor_boost(exercise) + specialty_penalty(exercise, text),
                        is_anchor=is_anchor_exercise(exercise),
                    )
                )

    matches.sort(
        key=lambda e: (
            -e.history,
            not e.is_anchor,
            -e.score,
            normalize(e.exercise.name),
        )
    )
    limited = matches[:MATCHES_CAP]

    weak = not limited or (len(limited) < WEAK_MATCH_COUNT and len(matches) < WEAK_MATCH_COUNT)
    if not weak:
        return TieredResults(tier1=limited)

    related.sort(key=lambda e: (-e.score, not e.is_anchor, normalize(e.exercise.name)))
    return TieredResults(tier1=limited, tier2=related[:RELATED_CAP])
