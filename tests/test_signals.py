"""Tests for the persisted alias, usage and affinity stores."""

import math

import pytest

from spotter.catalog.loader import parse_exercise_entry
from spotter.database.connection import DatabaseManager
from spotter.database.repository import collection_repo
from spotter.errors import InvalidExerciseName
from spotter.search.scoring import FamiliarityScorer
from spotter.signals.affinity import MAX_AFFINITY_SCORE, AffinityStore
from spotter.signals.aliases import AliasStore, generate_common
from spotter.signals.usage import UsageStore


# ----------------------------------------------------------------------
# Aliases
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_add_alias_deduplicates_normalized_text(db, clock):
    store = AliasStore(db, clock)
    first = await store.add_alias("sys:bench-press", "Bench  Press", "manual")
    second = await store.add_alias("sys:bench-press", "bench press", "manual")

    assert first.id == second.id
    assert len(store.records) == 1

    reloaded = AliasStore(db, clock)
    assert len(await reloaded.load()) == 1


@pytest.mark.asyncio
async def test_same_text_for_another_exercise_is_a_new_alias(db, clock):
    store = AliasStore(db, clock)
    await store.add_alias("sys:a", "press")
    await store.add_alias("sys:b", "press")
    assert len(store.records) == 2


@pytest.mark.asyncio
async def test_blank_alias_is_rejected(db, clock):
    with pytest.raises(InvalidExerciseName):
        await AliasStore(db, clock).add_alias("sys:squat", "   ")


@pytest.mark.asyncio
async def test_learn_is_idempotent(db, clock):
    store = AliasStore(db, clock)
    learned = await store.learn("BB Bench", "sys:barbell-bench-press")
    assert learned.source == "learned"
    assert learned.normalized_alias == "bb bench"
    assert await store.learn("bb bench", "sys:barbell-bench-press") is None
    assert store.alias_texts_for("sys:barbell-bench-press") == ["BB Bench"]


@pytest.mark.asyncio
async def test_find_by_query_classifies_hits(db, clock):
    store = AliasStore(db, clock)
    await store.add_alias("sys:ohp", "ohp")
    await store.add_alias("sys:lat", "lat pulldown")
    await store.add_alias("sys:row", "pendlay row")

    hits = {hit.exercise_id: hit.match for hit in store.find_by_query("ohp")}
    assert hits == {"sys:ohp": "exact"}

    hits = {hit.exercise_id: hit.match for hit in store.find_by_query("lat")}
    assert hits == {"sys:lat": "prefix"}

    hits = {hit.exercise_id: hit.match for hit in store.find_by_query("barbell row")}
    assert hits == {"sys:row": "token"}


def test_generate_common_aliases():
    assert generate_common("Barbell Bench Press") == ["bb", "barbellbenchpress"]
    assert generate_common("Romanian Deadlift") == ["rdl", "romaniandeadlift"]
    assert generate_common("Squat") == []


@pytest.mark.asyncio
async def test_seed_adds_common_and_anchor_aliases_once(db, clock):
    store = AliasStore(db, clock)
    catalog = [parse_exercise_entry("Barbell Deadlift"), parse_exercise_entry("Plank")]

    assert await store.seed(catalog) == 3
    texts = store.alias_texts_for(catalog[0].id)
    assert sorted(texts) == ["barbelldeadlift", "bb", "deadlift"]
    assert all(r.source == "system" for r in store.records)

    assert await store.seed(catalog) == 0


@pytest.mark.asyncio
async def test_alias_cleanup(db, clock):
    store = AliasStore(db, clock)
    await store.add_alias("sys:keep", "keep")
    await store.add_alias("sys:gone", "gone")
    assert await store.cleanup({"sys:keep"}) == 1
    assert [r.exercise_id for r in await store.load()] == ["sys:keep"]


# ----------------------------------------------------------------------
# Usage
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_record_usage_counts_and_keeps_context(db, clock):
    store = UsageStore(db, clock)
    await store.record_usage("sys:squat", "leg-day")
    record = await store.record_usage("sys:squat")

    assert record.use_count == 2
    assert record.last_context_id == "leg-day"
    assert store.context_score("sys:squat", "leg-day") == 1.0
    assert store.context_score("sys:squat", "push-day") == 0.0
    assert store.context_score("sys:squat", None) == 0.0


@pytest.mark.asyncio
async def test_usage_score_decays_with_time(db, clock):
    store = UsageStore(db, clock)
    assert store.usage_score("sys:squat") == 0.0

    await store.record_usage("sys:squat")
    fresh = store.usage_score("sys:squat")
    assert 0.0 < fresh < 1.0

    clock.advance(days=60)
    assert store.usage_score("sys:squat") < fresh


@pytest.mark.asyncio
async def test_recent_orders_by_last_use(db, clock):
    store = UsageStore(db, clock)
    for exercise_id in ["sys:a", "sys:b", "sys:c"]:
        await store.record_usage(exercise_id)
        clock.advance(minutes=1)
    await store.record_usage("sys:a")

    assert store.recent() == ["sys:a", "sys:c", "sys:b"]
    assert store.recent(limit=1) == ["sys:a"]


@pytest.mark.asyncio
async def test_recent_is_limited_to_seven(db, clock):
    store = UsageStore(db, clock)
    for i in range(10):
        await store.record_usage(f"sys:{i}")
        clock.advance(minutes=1)
    assert len(store.recent(limit=20)) == 7


@pytest.mark.asyncio
async def test_usage_cleanup(db, clock):
    store = UsageStore(db, clock)
    await store.record_usage("sys:keep")
    await store.record_usage("sys:gone")
    assert await store.cleanup({"sys:keep"}) == 1
    assert list((await store.load()).keys()) == ["sys:keep"]


# ----------------------------------------------------------------------
# Affinity
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_affinity_score_is_capped(db, clock):
    store = AffinityStore(db, clock)
    for _ in range(20):
        await store.record("Squat", "sys:squat")

    assert store.entries("squat")[0].score == MAX_AFFINITY_SCORE
    assert store.affinity_score("  SQUAT ", "sys:squat") == 1.0
    assert store.affinity_score("squat", "sys:front-squat") == 0.0


@pytest.mark.asyncio
async def test_affinity_list_is_capped_and_evicts_oldest(db, clock):
    store = AffinityStore(db, clock)
    for i in range(6):
        await store.record("press", f"sys:{i}")

    assert store.exercise_ids("press") == ["sys:5", "sys:4", "sys:3", "sys:2", "sys:1"]


@pytest.mark.asyncio
async def test_reinforced_affinity_moves_to_front(db, clock):
    store = AffinityStore(db, clock)
    await store.record("row", "sys:a")
    await store.record("row", "sys:b")
    await store.record("row", "sys:a")

    entries = store.entries("row")
    assert [(e.exercise_id, e.score) for e in entries] == [("sys:a", 2), ("sys:b", 1)]


@pytest.mark.asyncio
async def test_blank_affinity_query_is_ignored(db, clock):
    store = AffinityStore(db, clock)
    await store.record("  ", "sys:a")
    assert await store.load() == {}


@pytest.mark.asyncio
async def test_affinity_cleanup_drops_empty_queries(db, clock):
    store = AffinityStore(db, clock)
    await store.record("row", "sys:gone")
    await store.record("press", "sys:keep")
    await store.record("press", "sys:gone")

    assert await store.cleanup({"sys:keep"}) == 2
    affinities = await store.load()
    assert list(affinities) == ["press"]
    assert [e.exercise_id for e in affinities["press"]] == ["sys:keep"]


# ----------------------------------------------------------------------
# Storage faults
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_corrupt_payload_loads_as_empty(db, clock):
    async with db.get_session() as session:
        await collection_repo.put_payload(session, "exercise.aliases", "{not json")
        await collection_repo.put_payload(session, "exercise.usage.stats", '["wrong shape"]')

    assert await AliasStore(db, clock).load() == []
    assert await UsageStore(db, clock).load() == {}


@pytest.mark.asyncio
async def test_uninitialized_database_degrades_quietly(tmp_path, clock):
    offline = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'never.db'}")
    store = AffinityStore(offline, clock)

    assert await store.load() == {}
    await store.record("squat", "sys:squat")
    assert store.affinity_score("squat", "sys:squat") == 0.1


@pytest.mark.asyncio
async def test_history_score_weighs_raw_usage(db, clock):
    usage = UsageStore(db, clock)
    affinity = AffinityStore(db, clock)
    scorer = FamiliarityScorer(AliasStore(db, clock), usage, affinity)
    squat = parse_exercise_entry("Squat")

    for _ in range(3):
        await usage.record_usage(squat.id)
    await affinity.record("squat", squat.id)

    raw = 1.0 + 0.3 * math.log1p(3)
    assert scorer.history_score(squat, "squat") == pytest.approx(raw * 10 + 0.1 * 5)
    assert scorer.history_score(squat, "squat") > 10
