"""Tests for the collection repository and database manager."""

import pytest

from spotter.database.connection import DatabaseManager
from spotter.database.repository import collection_repo


@pytest.mark.asyncio
async def test_health_check(db, tmp_path):
    assert await db.health_check() is True
    assert await DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'x.db'}").health_check() is False


@pytest.mark.asyncio
async def test_payload_insert_then_replace(db):
    async with db.get_session() as session:
        assert await collection_repo.get_payload(session, "exercise.aliases") is None
        await collection_repo.put_payload(session, "exercise.aliases", "[]")

    async with db.get_session() as session:
        row = await collection_repo.put_payload(session, "exercise.aliases", '[{"a": 1}]')
        assert row.key == "exercise.aliases"

    async with db.get_session() as session:
        assert await collection_repo.get_payload(session, "exercise.aliases") == '[{"a": 1}]'


@pytest.mark.asyncio
async def test_session_requires_initialize(tmp_path):
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'x.db'}")
    with pytest.raises(RuntimeError):
        async with manager.get_session():
            pass
    with pytest.raises(RuntimeError):
        await manager.create_tables()


@pytest.mark.asyncio
async def test_create_tables_keeps_existing_data(db):
    async with db.get_session() as session:
        await collection_repo.put_payload(session, "user_exercises_v1", "[]")

    await db.create_tables()

    async with db.get_session() as session:
        assert await collection_repo.get_payload(session, "user_exercises_v1") == "[]"
