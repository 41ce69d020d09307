#!/usr/bin/env python3
"""Recreate the stored-collections schema. This forgets every learned alias,
usage count, query affinity and user exercise."""

import asyncio
import sys

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from spotter.database.connection import db_manager
from spotter.database.models import Base


async def recreate_tables() -> bool:
    print(f"Recreating tables at {db_manager.url}...")

    try:
        await db_manager.initialize()
        async with db_manager.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    except SQLAlchemyError as e:
        print(f"Failed to recreate tables: {e}")
        return False
    finally:
        await db_manager.close()

    print(f"Tables: {', '.join(tables)}")
    return True


if __name__ == "__main__":
    sys.exit(0 if asyncio.run(recreate_tables()) else 1)
