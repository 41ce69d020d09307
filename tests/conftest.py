"""Shared fixtures: a throwaway SQLite database and a controllable clock."""

from datetime import datetime, timedelta, timezone

import pytest

from spotter.database.connection import DatabaseManager


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
async def db(tmp_path):
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'spotter.db'}")
    await manager.initialize()
    await manager.create_tables()
    yield manager
    await manager.close()
