"""Tests for precision/discovery intent detection."""

import pytest

from spotter.search.intent import detect_intent


@pytest.mark.parametrize(
    "query",
    ["bench press", "bb bench", "squat", "row", "rdl", "incline", "45", "pull-up", "Curls"],
)
def test_precision_queries(query):
    assert detect_intent(query) == "precision"


@pytest.mark.parametrize("query", ["legs", "barbell", "chest", "db", "plank", "", "   ", "!!!"])
def test_discovery_queries(query):
    assert detect_intent(query) == "discovery"
