"""Guild settings and dedup ledgers on top of the async SQLAlchemy session.

The notifier is the only writer of ``last_posted`` and
``scheduled_reminders``; the admin API is the only writer of the
configuration columns. Each method runs in its own session and commits, so
every read-modify-write is a single transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fightnight.models import GuildSettings, LastPosted, ScheduledReminder

logger = logging.getLogger(__name__)


@dataclass
class GuildSnapshot:
    """Everything the notifier needs about one guild, read in one go."""
    guild_id: str
    channel_id: str = ""
    timezone: str = ""
    enabled: bool = False
    org: str | None = None
    run_hour: int | None = None
    reminders_enabled: bool = False
    ufc_ignore_contender: bool = True
    last_posted: dict[str, str] = field(default_factory=dict)


class GuildStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # -- reads -----------------------------------------------------------

    async def list_guild_ids(self) -> list[str]:
        async with self._session_factory() as session:
            result = await session.execute(select(GuildSettings.guild_id).order_by(GuildSettings.guild_id))
            return list(result.scalars().all())

    async def get_guild_settings(self, guild_id: str) -> GuildSnapshot:
        """Return the guild's settings; unknown guilds get an all-defaults snapshot."""
        async with self._session_factory() as session:
            row = await session.get(GuildSettings, guild_id)
            result = await session.execute(
                select(LastPosted.org, LastPosted.last_date).where(LastPosted.guild_id == guild_id)
            )
            last_posted = {org: last_date for org, last_date in result.all()}

        snap = GuildSnapshot(guild_id=guild_id, last_posted=last_posted)
        if row is None:
            return snap
        snap.channel_id = row.channel_id or ""
        snap.timezone = row.timezone or ""
        snap.enabled = bool(row.enabled)
        snap.org = row.org or None
        snap.run_hour = row.run_hour
        snap.reminders_enabled = bool(row.reminders_enabled)
        snap.ufc_ignore_contender = True if row.ufc_ignore_contender is None else bool(row.ufc_ignore_contender)
        return snap

    async def has_scheduled_reminder(self, guild_id: str, org: str, event_date: str) -> bool:
        async with self._session_factory() as session:
            row = await session.get(ScheduledReminder, (guild_id, org, event_date))
            return row is not None

    # -- ledger writes ---------------------------------------------------

    async def update_last_posted(self, guild_id: str, org: str, date_key: str) -> bool:
        """Record ``date_key`` (YYYY-MM-DD) as the last posted date.

        Refuses to move the ledger backwards. Returns True when the stored
        value changed.
        """
        async with self._session_factory() as session:
            row = await session.get(LastPosted, (guild_id, org))
            if row is None:
                session.add(LastPosted(guild_id=guild_id, org=org, last_date=date_key))
            elif date_key > row.last_date:
                row.last_date = date_key
            else:
                if date_key < row.last_date:
                    logger.warning(
                        "Guild %s: not moving last_posted[%s] back from %s to %s",
                        guild_id, org, row.last_date, date_key,
                    )
                return False
            await session.commit()
            return True

    async def mark_scheduled_reminder(
        self, guild_id: str, org: str, event_date: str, reminder_id: str
    ) -> None:
        async with self._session_factory() as session:
            stmt = insert(ScheduledReminder).values(
                guild_id=guild_id, org=org, event_date=event_date, reminder_id=reminder_id
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["guild_id", "org", "event_date"],
                set_={"reminder_id": stmt.excluded.reminder_id},
            )
            await session.execute(stmt)
            await session.commit()

    # -- configuration writes --------------------------------------------

    async def _update(self, guild_id: str, **values) -> None:
        async with self._session_factory() as session:
            row = await session.get(GuildSettings, guild_id)
            if row is None:
                row = GuildSettings(guild_id=guild_id)
                session.add(row)
            for key, value in values.items():
                setattr(row, key, value)
            await session.commit()

    async def update_channel(self, guild_id: str, channel_id: str) -> None:
        await self._update(guild_id, channel_id=channel_id)

    async def update_timezone(self, guild_id: str, tz_name: str | None) -> None:
        await self._update(guild_id, timezone=tz_name)

    async def update_org(self, guild_id: str, org: str) -> None:
        await self._update(guild_id, org=org)

    async def update_enabled(self, guild_id: str, enabled: bool) -> None:
        await self._update(guild_id, enabled=enabled)

    async def update_run_hour(self, guild_id: str, hour: int | None) -> None:
        if hour is not None and not 0 <= hour <= 23:
            raise ValueError(f"run hour must be 0-23, got {hour}")
        await self._update(guild_id, run_hour=hour)

    async def update_reminders_enabled(self, guild_id: str, enabled: bool) -> None:
        await self._update(guild_id, reminders_enabled=enabled)

    async def update_ufc_ignore_contender(self, guild_id: str, ignore: bool) -> None:
        await self._update(guild_id, ufc_ignore_contender=ignore)
