from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# --- Normalized events ---
class Link(BaseModel):
    title: str
    url: str


class Bout(BaseModel):
    weight_class: str = ""
    red_name: str = ""
    red_record: str = ""
    blue_name: str = ""
    blue_record: str = ""
    winner: str | None = None
    scheduled: datetime | None = None  # UTC, when the upstream record has per-bout timing

    model_config = {"frozen": True}


class Event(BaseModel):
    """Cross-organization event shape returned by every provider.

    Times are UTC; presentation layers convert to the guild's zone.
    ``selection``, ``resolution`` and ``card_source`` record which branch of
    the selection/resolution pipeline produced the event.
    """
    org: str
    id: str = ""
    name: str
    short_name: str = ""
    start: datetime
    end: datetime | None = None
    banner_url: str | None = None
    links: list[Link] = []
    bouts: list[Bout] = []
    selection: str = "future"  # "ongoing" | "recent" | "future"
    resolution: str = ""  # "id_match" | "fuzzy_match" | "fetched"
    card_source: str = "none"  # "scoreboard" | "core_api" | "none"

    @property
    def display_name(self) -> str:
        return (self.name or "").strip() or self.short_name


class CardOut(BaseModel):
    main_card: list[Bout]
    prelims: list[Bout]


class NextEventOut(BaseModel):
    event: Event | None
    card: CardOut | None = None
    countdown: str | None = None  # e.g. "in 1d 2h 5m"


# --- Guilds ---
RESET_RUN_HOUR = -1


class GuildUpdate(BaseModel):
    """Partial settings update; omitted fields are left unchanged.

    ``timezone=""`` and ``run_hour=-1`` reset the guild to the global TZ / RUN_AT.
    """
    channel_id: str | None = None
    timezone: str | None = None
    org: str | None = None
    enabled: bool | None = None
    run_hour: int | None = Field(default=None, ge=RESET_RUN_HOUR, le=23)
    reminders_enabled: bool | None = None
    ufc_ignore_contender: bool | None = None


class GuildStatusOut(BaseModel):
    guild_id: str
    channel_id: str | None
    timezone: str
    org: str | None
    notifications: bool
    reminders: bool
    run_hour: int
    run_hour_source: str  # "guild" | "default"
    ufc_ignore_contender: bool
    last_posted: dict[str, str]


class NotifyOutcomeOut(BaseModel):
    guild_id: str
    status: str
    reason: str
    event_date: str | None = None
    message_id: str | None = None
    reminder_id: str | None = None
