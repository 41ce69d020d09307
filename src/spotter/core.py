"""Exercise search service: catalog, learning signals and ranking behind one API."""

import logging
from typing import Collection, Optional

from .catalog.loader import CatalogLoader
from .catalog.schemas import Exercise
from .catalog.snapshot import CatalogSnapshot
from .catalog.user import UserExerciseStore
from .database.connection import DatabaseManager, db_manager
from .errors import InvalidExerciseName, UnknownExercise
from .search import unified
from .search.refiners import group_results
from .search.schemas import BrowseResult, DiscoveryResult, TieredResults
from .search.scoring import FamiliarityScorer
from .search.text import normalize
from .search.tiered import search_with_intent
from .signals.affinity import AffinityStore
from .signals.aliases import AliasStore, generate_common
from .signals.base import Clock
from .signals.usage import MAX_RECENTS, UsageStore

logger = logging.getLogger(__name__)


class ExerciseSearchService:
    """Searches the merged catalog and learns from what the user picks.

    Reads are synchronous over the current snapshot and in-memory signals.
    Every write goes through its store's load-modify-store cycle.
    """

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        loader: Optional[CatalogLoader] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._db = db or db_manager
        self._loader = loader or CatalogLoader()
        self.aliases = AliasStore(self._db, clock)
        self.usage = UsageStore(self._db, clock)
        self.affinity = AffinityStore(self._db, clock)
        self.users = UserExerciseStore(self._db, clock)
        self.scorer = FamiliarityScorer(self.aliases, self.usage, self.affinity)
        self.snapshot = CatalogSnapshot()

    async def initialize(self) -> None:
        await self._db.initialize()
        await self._db.create_tables()

        system = await self._loader.load()
        await self.aliases.load()
        await self.usage.load()
        await self.affinity.load()
        await self.users.load()

        self.snapshot = CatalogSnapshot(system=tuple(system), user=tuple(self.users.exercises))
        await self.aliases.seed(system)
        logger.info(
            "Search ready: %d system, %d user exercises",
            len(self.snapshot.system), len(self.snapshot.user),
        )

    async def close(self) -> None:
        await self._db.close()

    def search(self, query: str, context_id: Optional[str] = None) -> TieredResults:
        """Familiarity-ranked matches (tier1) and related suggestions (tier2)."""
        return search_with_intent(self.snapshot.all_exercises(), query, self.scorer, context_id)

    def browse(
        self,
        query: str,
        equipment: Collection[str] = (),
        buckets: Collection[str] = (),
    ) -> BrowseResult:
        """Intent-routed search with the refiners it offers and any active ones applied."""
        result = unified.search(self.snapshot.all_exercises(), query)
        refiners = unified.generate_refiners(result)
        result = unified.apply_refiners(result, equipment, buckets)

        groups = None
        if isinstance(result, DiscoveryResult) and normalize(query):
            groups = group_results(result.results, query)
        return BrowseResult(result=result, refiners=refiners, groups=groups)

    def recent_exercises(self, limit: int = MAX_RECENTS) -> list[Exercise]:
        recents = []
        for exercise_id in self.usage.recent(limit):
            exercise = self.snapshot.get(exercise_id)
            if exercise is not None:
                recents.append(exercise)
        return recents

    async def add_exercise(
        self, name: str, query: Optional[str] = None, context_id: Optional[str] = None
    ) -> Exercise:
        """Create a user exercise and select it.

        Returns the existing exercise untouched when the normalized name is
        already in the catalog.
        """
        if not name.strip():
            raise InvalidExerciseName("Exercise name cannot be empty")

        existing = self.snapshot.find_by_name(name)
        if existing is not None:
            return existing

        exercise = await self.users.add(name)
        self.snapshot = self.snapshot.with_user_exercise(exercise)

        for alias in generate_common(exercise.name):
            await self.aliases.add_alias(exercise.id, alias, "system")
        await self.usage.record_usage(exercise.id, context_id)
        if query and query.strip():
            await self.affinity.record(query, exercise.id)
        return exercise

    async def record_selection(
        self,
        query: str,
        exercise_id: str,
        context_id: Optional[str] = None,
        learn_alias: bool = True,
    ) -> Exercise:
        """Learn from the user picking exercise_id for query.

        Records usage and query affinity, and with learn_alias remembers the
        query as an alias when it differs from the exercise name.
        """
        exercise = self.snapshot.get(exercise_id)
        if exercise is None:
            raise UnknownExercise(exercise_id)

        await self.usage.record_usage(exercise.id, context_id)
        if query.strip():
            await self.affinity.record(query, exercise.id)
            if learn_alias and normalize(query) != normalize(exercise.name):
                await self.aliases.learn(query, exercise.id)
        return exercise

    async def cleanup(self, existing_ids: Optional[set[str]] = None) -> dict[str, int]:
        """Forget signals for exercises no longer present.

        existing_ids defaults to every id in the current snapshot. User
        exercises outside existing_ids are removed too.
        """
        ids = existing_ids if existing_ids is not None else self.snapshot.exercise_ids()
        removed = {
            "aliases": await self.aliases.cleanup(ids),
            "usage": await self.usage.cleanup(ids),
            "affinity": await self.affinity.cleanup(ids),
            "user_exercises": await self.users.cleanup(ids),
        }
        if removed["user_exercises"]:
            self.snapshot = CatalogSnapshot(
                system=self.snapshot.system, user=tuple(self.users.exercises)
            )
        logger.info("Cleanup removed %s", removed)
        return removed
