"""System catalog loading with a built-in fallback.

The catalog comes from a JSON document over HTTP or on disk. Whatever goes
wrong, the loader returns a usable list: failures are logged with enough
detail to diagnose the source, and the fallback catalog is used instead.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import config
from ..search.anchors import ANCHOR_EXERCISES
from ..search.text import normalize
from .schemas import SystemExercise

logger = logging.getLogger(__name__)

_SLUG = re.compile(r"[^a-z0-9]+")

_ANCHOR_NAMES = frozenset(
    normalize(name) for names in ANCHOR_EXERCISES.values() for name in names
)


def _fallback(name: str, part: str, equipment: str) -> dict[str, Any]:
    return {"name": name, "bodyPart": part, "target": part, "equipment": [equipment]}


FALLBACK_ENTRIES: list[dict[str, Any]] = [
    _fallback("Bench Press", "chest", "barbell"),
    _fallback("Squat", "legs", "barbell"),
    _fallback("Deadlift", "back", "barbell"),
    _fallback("Overhead Press", "shoulders", "barbell"),
    _fallback("Barbell Row", "back", "barbell"),
    _fallback("Pull-up", "back", "body weight"),
    _fallback("Push-up", "chest", "body weight"),
    _fallback("Dip", "triceps", "body weight"),
    _fallback("Chin-up", "biceps", "body weight"),
    _fallback("Leg Press", "legs", "machine"),
    _fallback("Leg Curl", "legs", "machine"),
    _fallback("Leg Extension", "legs", "machine"),
    _fallback("Lateral Raise", "shoulders", "dumbbell"),
    _fallback("Bicep Curl", "biceps", "dumbbell"),
    _fallback("Tricep Extension", "triceps", "dumbbell"),
    _fallback("Shoulder Press", "shoulders", "dumbbell"),
    _fallback("Chest Fly", "chest", "dumbbell"),
    _fallback("Lunges", "legs", "body weight"),
    _fallback("Plank", "core", "body weight"),
    _fallback("Crunches", "core", "body weight"),
    _fallback("Russian Twist", "core", "body weight"),
    _fallback("Romanian Deadlift", "legs", "barbell"),
    _fallback("Front Squat", "legs", "barbell"),
    _fallback("Incline Bench Press", "chest", "barbell"),
]


def slugify(name: str) -> str:
    return _SLUG.sub("-", normalize(name)).strip("-")


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _texts(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return [str(value)]


def parse_exercise_entry(entry: Any) -> Optional[SystemExercise]:
    """Build a SystemExercise from a bare name or a catalog object, or None if unusable."""
    if isinstance(entry, str):
        data: dict[str, Any] = {"name": entry}
    elif isinstance(entry, dict) and isinstance(entry.get("name"), str):
        data = entry
    else:
        return None

    name = data["name"].strip()
    if not name:
        return None

    target = _text(data.get("target"))
    primary = _texts(data.get("primaryMuscles")) or ([target] if target else [])
    entry_id = data.get("id")

    return SystemExercise(
        id=entry_id if isinstance(entry_id, str) and entry_id else f"sys:{slugify(name)}",
        name=name,
        aliases=_texts(data.get("aliases")),
        body_part=_text(data.get("bodyPart")),
        target=target,
        equipment=_texts(data.get("equipment")),
        primary_muscles=primary,
        secondary_muscles=_texts(data.get("secondaryMuscles")),
        category=_text(data.get("category")),
        instructions=_texts(data.get("instructions")),
        force=_text(data.get("force")),
        mechanic=_text(data.get("mechanic")),
        level=_text(data.get("level")),
        is_anchor=data.get("isAnchor") is True or normalize(name) in _ANCHOR_NAMES,
    )


def parse_catalog(document: Any) -> list[SystemExercise]:
    """Parse a bare array, or an object holding an "exercises" or "results" array."""
    if isinstance(document, list):
        entries = document
    elif isinstance(document, dict) and isinstance(document.get("exercises"), list):
        entries = document["exercises"]
    elif isinstance(document, dict) and isinstance(document.get("results"), list):
        entries = document["results"]
    else:
        entries = []

    exercises = []
    for entry in entries:
        exercise = parse_exercise_entry(entry)
        if exercise is not None:
            exercises.append(exercise)
    return exercises


def fallback_catalog() -> list[SystemExercise]:
    return parse_catalog(FALLBACK_ENTRIES)


class CatalogLoader:
    """Loads the System catalog once per process."""

    def __init__(
        self,
        source: str | None = None,
        timeout: float | None = None,
        retry_attempts: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.source = source or config.catalog.source
        self.timeout = timeout if timeout is not None else config.catalog.timeout
        self.retry_attempts = retry_attempts or config.catalog.retry_attempts
        self._transport = transport

    def _fall_back(self, reason: str, **details: Any) -> list[SystemExercise]:
        fallback = fallback_catalog()
        detail = " ".join(f"{key}={value!r}" for key, value in details.items())
        logger.error(
            "Catalog %s %s (%s); using fallback list of %d exercises",
            self.source, reason, detail, len(fallback),
        )
        return fallback

    def _preview(self, text: str) -> str:
        return text[: config.catalog.preview_chars]

    async def _fetch(self) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=0.5, max=5),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await client.get(self.source, headers={"Cache-Control": "no-store"})
        return response

    async def _load_remote(self) -> list[SystemExercise]:
        try:
            response = await self._fetch()
        except httpx.HTTPError as e:
            return self._fall_back("request failed", error=str(e))

        content_type = response.headers.get("content-type", "")
        details = dict(
            status=response.status_code,
            content_type=content_type,
            preview=self._preview(response.text),
        )
        # An HTML body means the file is missing and something served a page instead.
        if "text/html" in content_type:
            return self._fall_back("returned HTML", **details)
        if not response.is_success:
            return self._fall_back("returned an error status", **details)
        if "application/json" not in content_type:
            return self._fall_back("is not JSON", **details)

        try:
            document = response.json()
        except ValueError:
            return self._fall_back("could not be decoded", **details)
        return self._parsed_or_fallback(document)

    def _load_local(self) -> list[SystemExercise]:
        try:
            raw = Path(self.source).read_text(encoding="utf-8")
        except OSError as e:
            return self._fall_back("could not be read", error=str(e))
        try:
            document = json.loads(raw)
        except ValueError:
            return self._fall_back("could not be decoded", preview=self._preview(raw))
        return self._parsed_or_fallback(document)

    def _parsed_or_fallback(self, document: Any) -> list[SystemExercise]:
        exercises = parse_catalog(document)
        if not exercises:
            size = len(document) if isinstance(document, (list, dict)) else 0
            return self._fall_back("has no valid exercises", entries=size)
        logger.info("Loaded %d system exercises from %s", len(exercises), self.source)
        return exercises

    async def load(self) -> list[SystemExercise]:
        """Return the System catalog, or the fallback catalog if the source is unusable."""
        if self.source.startswith(("http://", "https://")):
            return await self._load_remote()
        return self._load_local()
