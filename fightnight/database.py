import logging
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from fightnight.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=False,
    connect_args={"timeout": 5},  # SQLite busy timeout for the single writer
)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


# Columns added after the first release; applied to databases created by
# older versions. Each entry is (table, column, ddl type).
_ADDED_COLUMNS = [
    ("guild_settings", "enabled", "INTEGER"),
    ("guild_settings", "org", "TEXT"),
    ("guild_settings", "run_hour", "INTEGER"),
    ("guild_settings", "reminders_enabled", "INTEGER"),
    ("guild_settings", "ufc_ignore_contender", "INTEGER"),
]


async def init_db(db_engine=None):
    """Create tables and apply additive migrations."""
    db_engine = db_engine or engine
    db_path = db_engine.url.database
    if db_engine.url.get_backend_name() == "sqlite" and db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    # Import models so their tables are registered on Base.metadata
    from fightnight import models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    for table, column, ddl in _ADDED_COLUMNS:
        async with db_engine.begin() as conn:
            try:
                await conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
                logger.info("Migration: added %s column to %s", column, table)
            except OperationalError as e:
                logger.debug("%s.%s column: %s", table, column, e)

    async with db_engine.begin() as conn:
        await conn.execute(text(
            "CREATE INDEX IF NOT EXISTS idx_reminder_guild_org "
            "ON scheduled_reminders (guild_id, org)"
        ))
