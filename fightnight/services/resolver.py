"""Turn a selected calendar entry into a full event record and card.

Calendar entries and event records come from different parts of the ESPN
document and do not always cross-reference, so resolution walks a list of
tiers from most to least precise:

1. ``ID_MATCH``    -- ``/events/<id>`` in the entry's ``$ref`` found among the fetched events
2. ``FUZZY_MATCH`` -- an event within 48h of the entry whose name overlaps the label
3. ``FETCHED``     -- the ``$ref`` fetched over the network and used verbatim

The card has its own fallback: when the resolved record carries no
competitions, the core competitions API is asked for a names-only card.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, Sequence

from fightnight.errors import ResolutionFailed, UpstreamError
from fightnight.espn.schemas import CalendarEntry, Competition, Competitor, CoreBout, ESPNEvent
from fightnight.schemas import Bout
from fightnight.timeutil import try_parse_api_time

logger = logging.getLogger(__name__)

FUZZY_WINDOW = timedelta(hours=48)

_EVENT_ID_RE = re.compile(r"/events/(\d+)")

EventFetcher = Callable[[str], Awaitable[ESPNEvent]]
CardFetcher = Callable[[str], Awaitable[list[CoreBout]]]


class Tier(str, enum.Enum):
    ID_MATCH = "id_match"
    FUZZY_MATCH = "fuzzy_match"
    FETCHED = "fetched"


class CardSource(str, enum.Enum):
    SCOREBOARD = "scoreboard"
    CORE_API = "core_api"
    NONE = "none"


@dataclass(frozen=True)
class Resolution:
    event: ESPNEvent
    tier: Tier


@dataclass(frozen=True)
class CardResolution:
    bouts: tuple[Bout, ...]
    source: CardSource

    @property
    def degraded(self) -> bool:
        return self.source is not CardSource.SCOREBOARD


def event_id_from_ref(ref: str) -> str | None:
    if not ref:
        return None
    m = _EVENT_ID_RE.search(ref)
    return m.group(1) if m else None


def similar_name(a: str, b: str) -> bool:
    """True when either string contains the other, ignoring case."""
    if not a or not b:
        return False
    al, bl = a.lower(), b.lower()
    return al in bl or bl in al


def _event_start(event: ESPNEvent):
    start = try_parse_api_time(event.date)
    if start is None and event.competitions:
        comp = event.competitions[0]
        start = try_parse_api_time(comp.start_date) or try_parse_api_time(comp.date)
    return start


async def resolve_event(
    entry: CalendarEntry,
    events: Sequence[ESPNEvent],
    fetch_event: EventFetcher | None = None,
) -> Resolution:
    """Resolve ``entry`` against ``events``; raises ResolutionFailed when no tier succeeds."""
    event_id = event_id_from_ref(entry.event.ref)
    if event_id:
        for event in events:
            if event.id == event_id:
                return Resolution(event, Tier.ID_MATCH)

    entry_start = try_parse_api_time(entry.start_date)
    if entry_start is not None:
        for event in events:
            start = _event_start(event)
            if start is None or abs(start - entry_start) > FUZZY_WINDOW:
                continue
            if similar_name(event.name, entry.label) or similar_name(event.short_name, entry.label):
                return Resolution(event, Tier.FUZZY_MATCH)

    if fetch_event is not None and entry.event.ref:
        try:
            event = await fetch_event(entry.event.ref)
        except UpstreamError as e:
            raise ResolutionFailed(
                f"Could not resolve {entry.label!r}: fetch of {entry.event.ref} failed: {e}"
            ) from e
        return Resolution(event, Tier.FETCHED)

    raise ResolutionFailed(
        f"Could not resolve {entry.label!r}: no id or name match and no $ref to fetch"
    )


# -- card extraction ---------------------------------------------------------


def _names(competitors: Sequence[Competitor]) -> tuple[str, str]:
    red = blue = None
    for c in competitors:
        if c.order == 1 and red is None:
            red = c.athlete.best_name
        elif c.order == 2 and blue is None:
            blue = c.athlete.best_name
    if red is None and competitors:
        red = competitors[0].athlete.best_name
    if blue is None and len(competitors) > 1:
        blue = competitors[1].athlete.best_name
    return red or "", blue or ""


def _records(competitors: Sequence[Competitor]) -> tuple[str, str]:
    red = blue = ""
    for c in competitors:
        rec = c.records[0].summary if c.records else ""
        if c.order == 1 and not red:
            red = rec
        elif c.order == 2 and not blue:
            blue = rec
    return red, blue


def _winner(competitors: Sequence[Competitor], red: str, blue: str) -> str | None:
    for c in competitors:
        if not c.winner:
            continue
        if c.order == 1:
            return red or None
        if c.order == 2:
            return blue or None
        return c.athlete.best_name or None
    return None


def bout_from_competition(comp: Competition) -> Bout:
    red, blue = _names(comp.competitors)
    red_rec, blue_rec = _records(comp.competitors)
    winner = None
    if comp.status.type.state.lower() == "post":
        winner = _winner(comp.competitors, red, blue)
    scheduled = try_parse_api_time(comp.start_date) or try_parse_api_time(comp.date)
    return Bout(
        weight_class=comp.type.abbreviation or comp.type.id,
        red_name=red,
        red_record=red_rec,
        blue_name=blue,
        blue_record=blue_rec,
        winner=winner,
        scheduled=scheduled,
    )


def bout_from_core(core: CoreBout) -> Bout:
    return Bout(weight_class=core.weight_class, red_name=core.fighter1, blue_name=core.fighter2)


async def resolve_card(event: ESPNEvent, fetch_card: CardFetcher | None = None) -> CardResolution:
    """Build the bout list, falling back to the core API for calendar-only records.

    Fallback failures degrade to an empty card rather than failing the event.
    """
    if event.competitions:
        bouts = tuple(bout_from_competition(c) for c in event.competitions)
        return CardResolution(bouts, CardSource.SCOREBOARD)

    if fetch_card is None or not event.id:
        return CardResolution((), CardSource.NONE)

    try:
        core = await fetch_card(event.id)
    except UpstreamError as e:
        logger.warning("Card fallback failed for event %s: %s", event.id, e)
        return CardResolution((), CardSource.NONE)

    if not core:
        return CardResolution((), CardSource.NONE)
    logger.info("Using core API card for event %s (%d bouts)", event.id, len(core))
    return CardResolution(tuple(bout_from_core(b) for b in core), CardSource.CORE_API)
