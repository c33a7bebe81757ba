"""UFC provider backed by the ESPN scoreboard."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

import httpx

from fightnight.config import settings
from fightnight.espn.client import ESPNClient
from fightnight.espn.schemas import ESPNEvent
from fightnight.providers.base import BaseProvider, ProviderOptions
from fightnight.providers.registry import register_provider
from fightnight.schemas import Event, Link
from fightnight.services.card import sort_bouts
from fightnight.services.resolver import resolve_card, resolve_event
from fightnight.services.selector import ONGOING, select_entry, select_recent

logger = logging.getLogger(__name__)

CONTENDER_SERIES = "Contender Series"
IGNORE_CONTENDER_FLAG = "ignore_contender_series"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _links(event: ESPNEvent) -> list[Link]:
    links: list[Link] = []
    for link in event.links:
        if not link.href:
            continue
        title = (link.text or link.short_text or "").strip()
        if title.lower() == "gamecast":
            title = "Event Page"
        links.append(Link(title=title or "Link", url=link.href))
    return links


def _banner(event: ESPNEvent) -> str | None:
    if event.logos and event.logos[0].href.strip():
        return event.logos[0].href
    return None


@register_provider("ufc")
class UFCProvider(BaseProvider):
    """Selects the ongoing or next UFC card from ESPN.

    Scoreboards for the previous, current and next year are merged so that
    selection near a year boundary sees both sides of it. Contender Series
    entries are skipped unless ``ignore_contender_series`` is False.
    """

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.user_agent = user_agent or settings.user_agent
        self.timeout = timeout or settings.http_timeout
        self.transport = transport
        self.clock = clock

    def ignore_labels(self, options: ProviderOptions) -> list[str]:
        if options.get(IGNORE_CONTENDER_FLAG, True):
            return [CONTENDER_SERIES]
        return []

    async def next_event(self, options: ProviderOptions | None = None) -> Event | None:
        options = options or ProviderOptions()
        now = self.clock().astimezone(timezone.utc)
        years = [now.year - 1, now.year, now.year + 1]

        async with ESPNClient(
            league="ufc", user_agent=self.user_agent, timeout=self.timeout, transport=self.transport
        ) as espn:
            board = await espn.fetch_scoreboards(years)

            ignore = self.ignore_labels(options)
            selection = select_entry(board.calendar, ignore, now)
            if selection is None or selection.state != ONGOING:
                # A card without an end time stays current for the rest of the night
                selection = select_recent(board.calendar, ignore, now) or selection
            if selection is None:
                logger.info("No ongoing or upcoming UFC calendar entry")
                return None

            resolution = await resolve_event(selection.entry, board.events, espn.fetch_event)
            card = await resolve_card(resolution.event, espn.fetch_card_for_event)

        ev = resolution.event
        logger.info(
            "Selected UFC event %s (%s, %s via %s, card from %s)",
            ev.id or "?", ev.name or ev.short_name, selection.state,
            resolution.tier.value, card.source.value,
        )
        return Event(
            org=self.org,
            id=ev.id,
            name=ev.name or ev.short_name or selection.entry.label,
            short_name=ev.short_name,
            start=selection.start,
            end=selection.end,
            banner_url=_banner(ev),
            links=_links(ev),
            bouts=sort_bouts(card.bouts),
            selection=selection.state,
            resolution=resolution.tier.value,
            card_source=card.source.value,
        )
