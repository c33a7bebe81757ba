"""Calendar selection: pick the single ongoing-or-next entry.

An entry is *ongoing* when it has an end time and ``start <= now < end``;
the earliest-starting ongoing entry wins. Otherwise the entry with the
earliest start strictly after ``now`` wins. ``select_entry`` never selects
an entry that has ended or that started without an end time.

Cards without an end time are covered by one bounded recency window,
applied by providers through ``select_recent``: such an entry counts as
*recent* for ``RECENT_WINDOW`` after its start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, Sequence

from fightnight.espn.schemas import CalendarEntry
from fightnight.timeutil import try_parse_api_time

logger = logging.getLogger(__name__)

ONGOING = "ongoing"
RECENT = "recent"
FUTURE = "future"

RECENT_WINDOW = timedelta(hours=12)


@dataclass(frozen=True)
class Selection:
    entry: CalendarEntry
    start: datetime
    end: datetime | None
    state: str  # ONGOING | RECENT | FUTURE


def matches_ignore(label: str, ignore_labels: Iterable[str]) -> bool:
    """Case-insensitive substring match of ``label`` against any ignore term."""
    if not label:
        return False
    lowered = label.lower()
    return any(term and term.lower() in lowered for term in ignore_labels)


def _candidates(
    entries: Sequence[CalendarEntry], ignore_labels: Iterable[str]
) -> Iterator[tuple[CalendarEntry, datetime, datetime | None]]:
    ignore_labels = [t for t in ignore_labels if t]
    for entry in entries:
        if matches_ignore(entry.label, ignore_labels):
            continue
        start = try_parse_api_time(entry.start_date)
        if start is None:
            continue
        end = try_parse_api_time(entry.end_date) if entry.end_date else None
        if end is not None and end < start:
            logger.debug("Skipping calendar entry %r: end before start", entry.label)
            continue
        yield entry, start, end


def select_entry(
    entries: Sequence[CalendarEntry],
    ignore_labels: Iterable[str],
    now: datetime,
) -> Selection | None:
    """Return the ongoing or next calendar entry, or None when nothing qualifies."""
    now = now.astimezone(timezone.utc)

    ongoing: Selection | None = None
    upcoming: Selection | None = None

    for entry, start, end in _candidates(entries, ignore_labels):
        # Strict comparisons keep the first-encountered entry on ties
        if end is not None and start <= now < end:
            if ongoing is None or start < ongoing.start:
                ongoing = Selection(entry, start, end, ONGOING)
            continue
        if start > now and (upcoming is None or start < upcoming.start):
            upcoming = Selection(entry, start, end, FUTURE)

    return ongoing or upcoming


def select_recent(
    entries: Sequence[CalendarEntry],
    ignore_labels: Iterable[str],
    now: datetime,
    window: timedelta = RECENT_WINDOW,
) -> Selection | None:
    """Return the most recently started entry without an end time still inside ``window``."""
    now = now.astimezone(timezone.utc)
    recent: Selection | None = None
    for entry, start, end in _candidates(entries, ignore_labels):
        if end is not None or not start <= now < start + window:
            continue
        if recent is None or start > recent.start:
            recent = Selection(entry, start, None, RECENT)
    return recent
