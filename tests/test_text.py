"""Unit tests for normalization and string match scoring."""

import pytest

from spotter.search.text import alias_match_score, edit_distance, match_score, normalize, simplify


def test_normalize_trims_lowercases_and_collapses():
    assert normalize("  Bench   PRESS\t") == "bench press"


@pytest.mark.parametrize("text", ["", "  Lat  Pulldown ", "OHP", "Pull-Up\n\nWide", "ÉCARTÉ  Fly"])
def test_normalize_is_idempotent(text):
    assert normalize(normalize(text)) == normalize(text)


def test_simplify_drops_punctuation():
    assert simplify("Pull-Up") == "pullup"
    assert simplify("Bent-Over Row!") == "bentover row"


def test_exact_match():
    assert match_score("bench press", "Bench Press") == 1.0


def test_prefix_match():
    assert match_score("bench", "Bench Press") == 0.8


def test_substring_match():
    assert match_score("press", "Bench Press") == 0.5


def test_token_overlap_without_containment():
    # {press, bench} vs {bench, press, incline}: 2 / 3
    assert match_score("press bench", "Incline Bench Press") == pytest.approx(2 / 3)


def test_single_typo_scores_below_substring():
    typo = match_score("squt", "squat")
    assert typo == pytest.approx(0.4)
    assert typo < match_score("quat", "squat")


def test_transposition_costs_two_edits():
    assert match_score("sqaut", "squat") == pytest.approx(0.2)


def test_unrelated_strings_score_zero():
    assert match_score("plank", "Barbell Squat") == 0.0


def test_empty_inputs_score_zero():
    assert match_score("", "Bench Press") == 0.0
    assert match_score("Bench Press", "") == 0.0
    assert match_score("   ", "Bench Press") == 0.0


def test_edit_distance_is_bounded():
    assert edit_distance("kitten", "sitting") == 3
    assert edit_distance("abc", "abcdefgh") == 4
    assert edit_distance("abcdefgh", "hgfedcba") == 4


def test_alias_match_score_takes_best_alias():
    assert alias_match_score("bb bench", ["barbell bench", "bb bench"]) == 1.0
    assert alias_match_score("bb bench", []) == 0.0
