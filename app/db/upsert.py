"""INSERT ... ON CONFLICT builders for the configured backend (PostgreSQL in production, SQLite in tests)."""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def upsert_insert(db: AsyncSession, model):
    """Return a dialect insert() for model that supports on_conflict_do_update / on_conflict_do_nothing."""
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        return sqlite.insert(model)
    if dialect == "postgresql":
        return postgresql.insert(model)
    raise NotImplementedError(f"Upsert is not supported on {dialect}")
