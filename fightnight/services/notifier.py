"""Per-guild notification decisions.

On each hourly tick every guild walks the same gates, in order:

    channel set -> enabled -> org with a provider -> local hour == run hour
    -> provider returns an event -> event is today (guild-local)
    -> not already posted today -> send -> record

A day-before reminder is evaluated independently of the send gates once
the provider has returned an event. Ledgers are written only after the
platform confirmed the send/creation, so a crash in between can cause a
duplicate post on the next due tick but never a silent skip.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable

from fightnight.config import settings
from fightnight.errors import FightNightError, SendError
from fightnight.metrics import NOTIFY_OUTCOMES_TOTAL, PROVIDER_ERRORS_TOTAL, REMINDERS_CREATED_TOTAL
from fightnight.providers.base import BaseProvider, ProviderOptions
from fightnight.providers.registry import get_provider
from fightnight.schemas import Event
from fightnight.services.formatting import (
    build_event_embed,
    build_message,
    primary_event_url,
    reminder_title,
)
from fightnight.services.sender import ChannelSender
from fightnight.services.store import GuildSnapshot, GuildStore
from fightnight.timeutil import ZoneChoice, date_key, local_date, resolve_zone, target_hour

logger = logging.getLogger(__name__)

POSTED = "posted"
SKIPPED = "skipped"
ERROR = "error"


@dataclass
class NotifyOutcome:
    guild_id: str
    status: str
    reason: str
    event_date: str | None = None
    message_id: str | None = None
    reminder_id: str | None = None


def provider_options(snap: GuildSnapshot) -> ProviderOptions:
    """Per-guild provider flags."""
    return ProviderOptions(flags={"ignore_contender_series": snap.ufc_ignore_contender})


class Notifier:
    def __init__(
        self,
        store: GuildStore,
        sender: ChannelSender,
        provider_factory: Callable[[str | None], BaseProvider | None] = get_provider,
        default_tz: str | None = None,
        default_run_at: str | None = None,
        reminder_duration: timedelta | None = None,
    ) -> None:
        self.store = store
        self.sender = sender
        self.provider_factory = provider_factory
        self.default_tz = default_tz or settings.tz
        self.default_run_at = default_run_at or settings.run_at
        self.reminder_duration = reminder_duration or timedelta(hours=settings.reminder_duration_hours)

    def zone_for(self, snap: GuildSnapshot) -> ZoneChoice:
        return resolve_zone(snap.timezone, self.default_tz)

    def is_due(self, snap: GuildSnapshot, now: datetime) -> bool:
        """True when ``now`` falls in the guild's notification hour, guild-local."""
        zone = self.zone_for(snap).zone
        return now.astimezone(zone).hour == target_hour(snap.run_hour, self.default_run_at)

    async def run_once(self, now: datetime | None = None) -> list[NotifyOutcome]:
        """Evaluate every guild sequentially; one guild's failure never stops the rest."""
        now = now or datetime.now(timezone.utc)
        outcomes = []
        for guild_id in await self.store.list_guild_ids():
            try:
                outcome = await self.notify_guild(guild_id, now)
            except Exception as e:
                logger.exception("Guild %s: notifier failed", guild_id)
                outcome = NotifyOutcome(guild_id, ERROR, f"unexpected error: {type(e).__name__}")
            NOTIFY_OUTCOMES_TOTAL.labels(status=outcome.status, reason=outcome.reason).inc()
            outcomes.append(outcome)

        posted = sum(1 for o in outcomes if o.status == POSTED)
        errors = sum(1 for o in outcomes if o.status == ERROR)
        logger.info(
            "Notifier tick %s: %d guilds, %d posted, %d errors",
            now.isoformat(), len(outcomes), posted, errors,
        )
        return outcomes

    async def notify_guild(self, guild_id: str, now: datetime, force: bool = False) -> NotifyOutcome:
        """Run the due-tick logic for one guild.

        ``force`` (preview mode) skips the due-hour gate, the "today" gate and
        the dedup check, and does not record the post in the ledger.
        """
        snap = await self.store.get_guild_settings(guild_id)
        if not snap.channel_id:
            return NotifyOutcome(guild_id, SKIPPED, "no channel")
        if not snap.enabled:
            return NotifyOutcome(guild_id, SKIPPED, "disabled")
        if not snap.org:
            return NotifyOutcome(guild_id, SKIPPED, "no org")
        org = snap.org
        provider = self.provider_factory(org)
        if provider is None:
            logger.warning("Guild %s: no provider for org %r", guild_id, org)
            return NotifyOutcome(guild_id, SKIPPED, "no provider")

        choice = self.zone_for(snap)
        if not force and not self.is_due(snap, now):
            return NotifyOutcome(guild_id, SKIPPED, "not due")

        try:
            event = await provider.next_event(provider_options(snap))
        except FightNightError as e:
            logger.error("Guild %s: %s provider failed: %s", guild_id, org, e)
            PROVIDER_ERRORS_TOTAL.labels(org=org, error_type=type(e).__name__).inc()
            return NotifyOutcome(guild_id, ERROR, "provider error")
        if event is None:
            logger.info("Guild %s: no %s event found", guild_id, org)
            return NotifyOutcome(guild_id, SKIPPED, "no event")

        today = now.astimezone(choice.zone).date()
        event_day = local_date(event.start, choice.zone)
        key = date_key(event_day)

        reminder_id = await self._maybe_remind(snap, org, event, event_day, today)

        if not force and event_day != today:
            return NotifyOutcome(guild_id, SKIPPED, "not today", event_date=key, reminder_id=reminder_id)
        if not force and snap.last_posted.get(org) == key:
            return NotifyOutcome(guild_id, SKIPPED, "already posted", event_date=key, reminder_id=reminder_id)

        content = build_message(org, event, choice.zone)
        embed = build_event_embed(org, choice.name, choice.zone, event)
        try:
            message_id = await self.sender.send_message(snap.channel_id, content, embed)
        except SendError as e:
            logger.error("Guild %s: send to channel %s failed: %s", guild_id, snap.channel_id, e)
            return NotifyOutcome(guild_id, ERROR, "send failed", event_date=key, reminder_id=reminder_id)

        if not force:
            await self.store.update_last_posted(guild_id, org, key)
        logger.info("Guild %s: posted %s event %r for %s", guild_id, org, event.display_name, key)
        return NotifyOutcome(
            guild_id, POSTED, "posted", event_date=key, message_id=message_id, reminder_id=reminder_id
        )

    async def _maybe_remind(
        self, snap: GuildSnapshot, org: str, event: Event, event_day: date, today: date
    ) -> str | None:
        """Create the day-before reminder once per (guild, org, event date)."""
        if not snap.reminders_enabled:
            return None
        if today != event_day - timedelta(days=1):
            return None
        key = date_key(event_day)
        if await self.store.has_scheduled_reminder(snap.guild_id, org, key):
            return None

        end = event.end or event.start + self.reminder_duration
        try:
            reminder_id = await self.sender.create_reminder(
                snap.guild_id, reminder_title(org, event), event.start, end,
                location=primary_event_url(event),
            )
        except SendError as e:
            logger.error("Guild %s: reminder for %s %s failed: %s", snap.guild_id, org, key, e)
            return None

        await self.store.mark_scheduled_reminder(snap.guild_id, org, key, reminder_id)
        REMINDERS_CREATED_TOTAL.labels(org=org).inc()
        logger.info("Guild %s: created %s reminder %s for %s", snap.guild_id, org, reminder_id, key)
        return reminder_id
