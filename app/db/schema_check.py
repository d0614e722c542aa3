import asyncio
import logging
from typing import List, Tuple

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine

import app.auth.models  # noqa: F401  (registers auth.users on Base.metadata)
import app.core.models  # noqa: F401
from app.db.session import Base, engine

logger = logging.getLogger(__name__)

SCHEMAS: Tuple[str, ...] = ("core", "school", "auth")


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """
    Ensure that all schemas and tables exist in the connected PostgreSQL database.
    Missing tables are created; existing ones are left as they are. Returns the created table names.
    """
    async with db_engine.begin() as conn:
        for schema in SCHEMAS:
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))

        def _missing(sync_conn) -> List[str]:
            inspector = inspect(sync_conn)
            return [
                table.fullname
                for table in Base.metadata.sorted_tables
                if not inspector.has_table(table.name, schema=table.schema)
            ]

        missing = await conn.run_sync(_missing)
        await conn.run_sync(Base.metadata.create_all)

    if missing:
        logger.info("Created missing tables: %s", ", ".join(missing))
    else:
        logger.info("All required tables already exist.")
    return missing


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(ensure_tables(engine))
