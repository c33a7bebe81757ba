import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from fightnight.database import init_db


@pytest.mark.asyncio
async def test_init_db_adds_columns_to_old_schema():
    engine = create_async_engine(
        "sqlite+aiosqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.execute(text(
            "CREATE TABLE guild_settings (guild_id TEXT PRIMARY KEY, channel_id TEXT, timezone TEXT)"
        ))
        await conn.execute(text("INSERT INTO guild_settings VALUES ('g1', 'c1', 'UTC')"))

    await init_db(engine)
    # Second run is a no-op
    await init_db(engine)

    async with engine.connect() as conn:
        cols = {row[1] for row in await conn.execute(text("PRAGMA table_info(guild_settings)"))}
        tables = {row[0] for row in await conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))}
        row = (await conn.execute(text("SELECT channel_id, enabled FROM guild_settings"))).one()
    await engine.dispose()

    assert {"enabled", "org", "run_hour", "reminders_enabled", "ufc_ignore_contender"} <= cols
    assert {"last_posted", "scheduled_reminders"} <= tables
    assert row == ("c1", None)
