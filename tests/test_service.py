"""End-to-end tests for the search service and its command-line front end."""

import json

import pytest

from spotter.catalog.loader import CatalogLoader
from spotter.catalog.schemas import UserExercise
from spotter.cli import SpotterCLI, format_tiers
from spotter.core import ExerciseSearchService
from spotter.errors import InvalidExerciseName, UnknownExercise
from spotter.search.schemas import TieredResults

CATALOG = [
    {"name": "Squat", "bodyPart": "upper legs", "target": "quads", "equipment": "barbell"},
    {"name": "Front Squat", "bodyPart": "upper legs", "target": "quads", "equipment": "barbell"},
    {"name": "Smith Machine Squat", "bodyPart": "upper legs", "target": "quads",
     "equipment": "smith machine"},
    {"name": "Bench Press", "bodyPart": "chest", "target": "pectorals", "equipment": "barbell"},
    {"name": "Barbell Bench Press", "bodyPart": "chest", "target": "pectorals",
     "equipment": "barbell"},
    {"name": "Leg Press", "bodyPart": "upper legs", "target": "quads", "equipment": "leverage machine"},
    {"name": "Plank", "bodyPart": "waist", "target": "abs", "equipment": "body weight"},
]

SMITH = "sys:smith-machine-squat"


@pytest.fixture
def catalog_path(tmp_path):
    path = tmp_path / "systemExercises.json"
    path.write_text(json.dumps(CATALOG), encoding="utf-8")
    return path


@pytest.fixture
async def service(db, clock, catalog_path):
    s = ExerciseSearchService(db=db, loader=CatalogLoader(source=str(catalog_path)), clock=clock)
    await s.initialize()
    yield s


def _names(entries) -> list[str]:
    return [e.exercise.name for e in entries]


@pytest.mark.asyncio
async def test_initialize_loads_catalog_and_seeds_aliases(service):
    assert len(service.snapshot.all_exercises()) == len(CATALOG)
    assert "bb" in service.aliases.alias_texts_for("sys:barbell-bench-press")
    assert "bench press" in service.aliases.alias_texts_for("sys:barbell-bench-press")
    assert service.aliases.alias_texts_for("sys:squat") == []
    assert service.aliases.alias_texts_for("sys:bench-press") == ["benchpress"]


@pytest.mark.asyncio
async def test_anchor_leads_without_history(service):
    results = service.search("squat")
    assert _names(results.tier1)[0] == "Squat"
    assert set(_names(results.tier1)) >= {"Squat", "Front Squat", "Smith Machine Squat"}


@pytest.mark.asyncio
async def test_selections_move_exercise_to_the_front(service):
    for _ in range(3):
        await service.record_selection("squat", SMITH)

    assert _names(service.search("squat").tier1)[0] == "Smith Machine Squat"
    assert service.affinity.exercise_ids("squat") == [SMITH]


@pytest.mark.asyncio
async def test_selection_teaches_alias(service):
    assert "Smith Machine Squat" not in _names(service.search("sms").tier1)

    await service.record_selection("sms", SMITH)

    assert "sms" in service.aliases.alias_texts_for(SMITH)
    assert _names(service.search("sms").tier1)[0] == "Smith Machine Squat"


@pytest.mark.asyncio
async def test_selection_by_exact_name_does_not_add_alias(service):
    before = len(service.aliases.records)
    await service.record_selection("  SQUAT ", "sys:squat")
    assert len(service.aliases.records) == before
    assert service.usage.get("sys:squat").use_count == 1


@pytest.mark.asyncio
async def test_selection_of_unknown_exercise_raises(service):
    with pytest.raises(UnknownExercise):
        await service.record_selection("squat", "sys:missing")


@pytest.mark.asyncio
async def test_add_exercise_creates_and_selects(service):
    exercise = await service.add_exercise("Zercher Squat", query="zerch", context_id="leg-day")

    assert isinstance(exercise, UserExercise)
    assert service.snapshot.get(exercise.id) == exercise
    assert "zerchersquat" in service.aliases.alias_texts_for(exercise.id)
    assert service.usage.context_score(exercise.id, "leg-day") == 1.0
    assert service.affinity.exercise_ids("zerch") == [exercise.id]
    assert "Zercher Squat" in _names(service.search("zercher").tier1)


@pytest.mark.asyncio
async def test_add_exercise_returns_existing(service):
    first = await service.add_exercise("Zercher Squat")
    again = await service.add_exercise("  zercher   SQUAT")
    system = await service.add_exercise("bench press")

    assert again.id == first.id
    assert system.id == "sys:bench-press"
    assert len(service.users.exercises) == 1

    with pytest.raises(InvalidExerciseName):
        await service.add_exercise("   ")


@pytest.mark.asyncio
async def test_recent_exercises(service, clock):
    await service.record_selection("squat", "sys:squat")
    clock.advance(minutes=5)
    await service.record_selection("plank", "sys:plank")

    assert [e.name for e in service.recent_exercises()] == ["Plank", "Squat"]
    assert [e.name for e in service.recent_exercises(limit=1)] == ["Plank"]


@pytest.mark.asyncio
async def test_cleanup_forgets_removed_exercises(service):
    exercise = await service.add_exercise("Zercher Squat", query="zerch")
    system_ids = {e.id for e in service.snapshot.system}

    removed = await service.cleanup(system_ids)

    assert removed == {"aliases": 1, "usage": 1, "affinity": 1, "user_exercises": 1}
    assert service.snapshot.get(exercise.id) is None
    assert await service.cleanup() == {
        "aliases": 0, "usage": 0, "affinity": 0, "user_exercises": 0,
    }


@pytest.mark.asyncio
async def test_learning_survives_restart(service, db, clock, catalog_path):
    await service.record_selection("sms", SMITH)
    created = await service.add_exercise("Zercher Squat")

    restarted = ExerciseSearchService(
        db=db, loader=CatalogLoader(source=str(catalog_path)), clock=clock
    )
    await restarted.initialize()

    assert restarted.snapshot.get(created.id).name == "Zercher Squat"
    assert _names(restarted.search("sms").tier1)[0] == "Smith Machine Squat"
    assert restarted.usage.get(SMITH).use_count == 1


@pytest.mark.asyncio
async def test_browse_routes_by_intent(service):
    precise = service.browse("bench press")
    assert precise.result.intent == "precision"
    assert precise.result.best[0].exercise.name == "Bench Press"
    assert precise.refiners == []
    assert precise.groups is None

    broad = service.browse("legs")
    assert broad.result.intent == "discovery"
    assert "Squat" in [m.exercise.name for m in broad.result.results]


# ----------------------------------------------------------------------
# CLI
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_cli_search_pick_and_recent(service):
    cli = SpotterCLI(service)

    lines = await cli.handle("squat")
    assert lines[0] == "Matches:"
    assert lines[1] == "   1. Squat"

    assert await cli.handle("pick 1") == ["Selected Squat"]
    assert await cli.handle("pick 99") == ["No result #99."]
    assert await cli.handle("recent") == ["  1. Squat"]


@pytest.mark.asyncio
async def test_cli_context_and_add(service):
    cli = SpotterCLI(service)

    assert await cli.handle("context leg-day") == ["Context: leg-day"]
    lines = await cli.handle("add Zercher Squat")
    assert lines[0].startswith("Selected Zercher Squat (usr:")
    assert await cli.handle("context") == ["Context: none"]


def test_format_tiers_without_results():
    assert format_tiers(TieredResults()) == [
        "No exercises found. Use 'add <name>' to create one."
    ]


@pytest.mark.asyncio
async def test_cli_pick_from_recent_does_not_reuse_last_search(service):
    cli = SpotterCLI(service)
    await cli.handle("bench press")
    assert await cli.handle("pick 1") == ["Selected Bench Press"]

    await cli.handle("squat")
    assert await cli.handle("recent") == ["  1. Bench Press"]
    assert await cli.handle("pick 1") == ["Selected Bench Press"]

    assert "squat" not in service.aliases.alias_texts_for("sys:bench-press")
    assert service.affinity.exercise_ids("squat") == []
    assert service.usage.get("sys:bench-press").use_count == 2


@pytest.mark.asyncio
async def test_cli_pick_after_browse_uses_browse_query(service):
    cli = SpotterCLI(service)
    await cli.handle("squat")

    lines = await cli.handle("browse legs")
    assert lines[:3] == ["[discovery]", "Results:", "   1. Front Squat (300)"]
    assert await cli.handle("pick 1") == ["Selected Front Squat"]

    assert service.affinity.exercise_ids("legs") == ["sys:front-squat"]
    assert service.affinity.exercise_ids("squat") == []
