"""Fakes for the outbound seams and small builders shared by the tests."""

from __future__ import annotations

from datetime import datetime, timezone

from fightnight.errors import SendError
from fightnight.providers.base import BaseProvider
from fightnight.schemas import Bout, Event, Link
from fightnight.services.store import GuildStore


class FakeSender:
    """Records sends; ``fail`` makes every call raise SendError."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.messages: list[dict] = []
        self.reminders: list[dict] = []

    async def send_message(self, channel_id, content, embed=None):
        if self.fail:
            raise SendError("channel unavailable")
        self.messages.append({"channel_id": channel_id, "content": content, "embed": embed})
        return f"msg-{len(self.messages)}"

    async def create_reminder(self, guild_id, title, start, end, location=""):
        if self.fail:
            raise SendError("missing permissions")
        self.reminders.append(
            {"guild_id": guild_id, "title": title, "start": start, "end": end, "location": location}
        )
        return f"rem-{len(self.reminders)}"


class StaticProvider(BaseProvider):
    """Provider returning a fixed event (or raising a fixed error)."""

    org = "ufc"

    def __init__(self, event: Event | None = None, error: Exception | None = None):
        self.event = event
        self.error = error
        self.calls = []

    async def next_event(self, options=None):
        self.calls.append(options)
        if self.error is not None:
            raise self.error
        return self.event


def make_event(start: datetime | None = None, name: str = "UFC 313: Pereira vs. Ankalaev", **kw) -> Event:
    start = start or datetime(2025, 3, 1, 2, 0, tzinfo=timezone.utc)
    kw.setdefault("links", [Link(title="Event Page", url="https://www.espn.com/mma/fightcenter/_/id/600051234")])
    kw.setdefault("bouts", [
        Bout(weight_class="LHW", red_name="Alex Pereira", red_record="12-2-0",
             blue_name="Magomed Ankalaev", blue_record="19-1-1"),
    ])
    return Event(org="ufc", id="600051234", name=name, short_name="UFC 313", start=start, **kw)


async def configure_guild(
    store: GuildStore,
    guild_id: str = "g1",
    tz: str = "UTC",
    run_hour: int | None = 2,
    org: str = "ufc",
    reminders: bool = False,
    channel_id: str = "c1",
):
    await store.update_channel(guild_id, channel_id)
    await store.update_timezone(guild_id, tz)
    await store.update_org(guild_id, org)
    await store.update_enabled(guild_id, True)
    await store.update_run_hour(guild_id, run_hour)
    await store.update_reminders_enabled(guild_id, reminders)
