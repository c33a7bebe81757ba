"""Main card / prelims split for display.

Upstream data does not tag card position, so the split is derived from the
bout count once the card is sorted by scheduled time:

    n >= 10   last 6 are the main card
    6..9      last 3 are the main card
    n < 6     everything is the main card

Both sections are reversed for display so the main event comes first.
Contender Series cards have no prelims.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from fightnight.schemas import Bout, Event

NO_PRELIMS_MARKER = "contender series"


@dataclass(frozen=True)
class Card:
    main_card: list[Bout]
    prelims: list[Bout]


def sort_bouts(bouts: Sequence[Bout]) -> list[Bout]:
    """Return a copy sorted by scheduled time; unknown times first, in input order."""
    # sorted() is stable, so equal keys keep their relative input order
    return sorted(
        bouts,
        key=lambda b: (b.scheduled is not None, b.scheduled.timestamp() if b.scheduled else 0.0),
    )


def split_card(bouts: Sequence[Bout]) -> tuple[list[Bout], list[Bout]]:
    """Split into (main_card, prelims), both in ascending time order."""
    ordered = sort_bouts(bouts)
    n = len(ordered)
    if n >= 10:
        cutoff = n - 6
    elif n >= 6:
        cutoff = n - 3
    else:
        cutoff = 0
    return ordered[cutoff:], ordered[:cutoff]


def has_no_prelims(event: Event) -> bool:
    name = (event.name or "").strip().lower()
    short = (event.short_name or "").strip().lower()
    return NO_PRELIMS_MARKER in name or NO_PRELIMS_MARKER in short


def build_card(event: Event) -> Card:
    """Display-ready card for ``event``; ``event.bouts`` is left untouched."""
    if has_no_prelims(event):
        return Card(main_card=list(reversed(sort_bouts(event.bouts))), prelims=[])
    main, prelims = split_card(event.bouts)
    return Card(main_card=list(reversed(main)), prelims=list(reversed(prelims)))
