"""Interactive terminal front end for exercise search."""

import asyncio
import logging
import sys
from typing import Optional

from .catalog.schemas import Exercise
from .config import config
from .core import ExerciseSearchService
from .errors import SpotterError
from .search.schemas import BrowseResult, PrecisionResult, TieredResults

logger = logging.getLogger(__name__)


def format_tiers(results: TieredResults) -> list[str]:
    """Numbered lines for matches then related suggestions."""
    lines = []
    number = 1
    for heading, entries in (("Matches", results.tier1), ("Related", results.tier2)):
        if not entries:
            continue
        lines.append(f"{heading}:")
        for entry in entries:
            lines.append(f"  {number:>2}. {entry.exercise.name}")
            number += 1
    return lines or ["No exercises found. Use 'add <name>' to create one."]


def browse_sections(browse: BrowseResult) -> list[tuple[str, list]]:
    """(heading, matches) in display order; pick numbers follow this order."""
    result = browse.result
    if isinstance(result, PrecisionResult):
        return [("Best", result.best), ("Related", result.related)]
    if browse.groups:
        return [(group.label, group.results) for group in browse.groups]
    return [("Results", result.results)]


def browse_exercises(browse: BrowseResult) -> list[Exercise]:
    return [m.exercise for _, matches in browse_sections(browse) for m in matches]


def format_browse(browse: BrowseResult) -> list[str]:
    lines = [f"[{browse.result.intent}]"]
    number = 1
    for heading, matches in browse_sections(browse):
        if not matches:
            continue
        lines.append(f"{heading}:")
        for m in matches:
            reason = getattr(m, "reason", None)
            detail = f"{reason}, {m.score}" if reason else f"{m.score}"
            lines.append(f"  {number:>2}. {m.exercise.name} ({detail})")
            number += 1
    if number == 1:
        lines.append("No exercises found.")

    if browse.refiners:
        offered = ", ".join(f"{r.label} ({r.count})" for r in browse.refiners)
        lines.append(f"Refine with: {offered}")
    return lines


class SpotterCLI:
    """REPL that searches as you type a line and learns from what you pick."""

    def __init__(self, service: Optional[ExerciseSearchService] = None) -> None:
        self._service = service or ExerciseSearchService()
        self._query = ""
        self._context_id: Optional[str] = None
        self._listed: list[Exercise] = []
        self._browse_query = ""
        self._equipment: set[str] = set()
        self._buckets: set[str] = set()

    async def initialize(self) -> None:
        await self._service.initialize()
        print(f"Loaded {len(self._service.snapshot.all_exercises())} exercises.")

    async def close(self) -> None:
        await self._service.close()

    async def run(self) -> None:
        await self.initialize()
        print("Spotter Exercise Search")
        print("Type a name to search, 'help' for commands or 'exit' to quit.")
        print("-" * 50)

        while True:
            try:
                user_input = input("Search: ").strip()
                if not user_input:
                    continue
                if user_input.lower() in ("exit", "quit", "bye"):
                    print("Goodbye!")
                    break
                if user_input.lower() == "help":
                    self._show_help()
                    continue

                print("\n".join(await self.handle(user_input)))
                print("-" * 50)

            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!")
                break
            except SpotterError as e:
                print(f"Error: {e}")
                continue

        await self.close()

    async def handle(self, line: str) -> list[str]:
        """Run one command line and return the lines to print."""
        command, _, argument = line.partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command == "pick" and argument.isdigit():
            return await self._pick(int(argument))
        if command == "add" and argument:
            exercise = await self._service.add_exercise(argument, self._query, self._context_id)
            return [f"Selected {exercise.name} ({exercise.id})"]
        if command == "recent":
            self._query = ""
            self._listed = self._service.recent_exercises()
            return [f"  {i}. {ex.name}" for i, ex in enumerate(self._listed, 1)] or ["No recent exercises."]
        if command == "browse":
            self._browse_query = argument
            self._equipment.clear()
            self._buckets.clear()
            return self._show_browse()
        if command == "refine" and argument:
            return self._refine(argument)
        if command == "context":
            self._context_id = argument or None
            return [f"Context: {self._context_id or 'none'}"]
        if command == "cleanup":
            removed = await self._service.cleanup()
            return [f"Removed {removed}"]

        self._query = line
        results = self._service.search(line, self._context_id)
        self._listed = results.matches() + results.related()
        return format_tiers(results)

    async def _pick(self, number: int) -> list[str]:
        if not 1 <= number <= len(self._listed):
            return [f"No result #{number}."]
        exercise = self._listed[number - 1]
        await self._service.record_selection(self._query, exercise.id, self._context_id)
        return [f"Selected {exercise.name}"]

    def _refine(self, label: str) -> list[str]:
        browse = self._service.browse(self._browse_query, self._equipment, self._buckets)
        refiner = next((r for r in browse.refiners if r.label.lower() == label.lower()), None)
        if refiner is None:
            return [f"No refiner named {label}."]

        active = self._equipment if refiner.type == "equipment" else self._buckets
        active.symmetric_difference_update({refiner.label})
        return self._show_browse()

    def _show_browse(self) -> list[str]:
        browse = self._service.browse(self._browse_query, self._equipment, self._buckets)
        self._query = self._browse_query
        self._listed = browse_exercises(browse)
        return format_browse(browse)

    def _show_help(self) -> None:
        print(
            "Spotter Commands:\n"
            "\n"
            "  <text>          - search, e.g. \"bb bench\" or \"legs\"\n"
            "  pick <n>        - select result n (teaches search your preference)\n"
            "  add <name>      - create and select a new exercise\n"
            "  recent          - recently used exercises\n"
            "  browse <text>   - intent-aware search with refiners\n"
            "  refine <label>  - toggle a refiner from the last browse\n"
            "  context <id>    - set the workout context (empty clears it)\n"
            "  cleanup         - forget signals for missing exercises\n"
            "\n"
            "  help  - show this message\n"
            "  exit  - quit"
        )


async def main() -> None:
    logging.basicConfig(level=config.logging.level, format=config.logging.format)
    logger.info("Starting Spotter (%s)", config.environment)
    cli = SpotterCLI()
    await cli.run()


def main_sync() -> None:
    """Entry point for pyproject.toml console_scripts."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nGoodbye!")
        sys.exit(0)


if __name__ == "__main__":
    main_sync()
