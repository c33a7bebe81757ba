"""Message text and Discord embed rendering for a normalized event."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Sequence

from fightnight.schemas import Bout, Event
from fightnight.services.card import build_card

EMBED_COLOR = 0xE74C3C
FIELD_LIMIT = 1024  # Discord embed field value limit


def _clock(local: datetime) -> str:
    """``3:04 PM`` without a zero-padded hour."""
    return f"{local.hour % 12 or 12}:{local:%M %p}"


def format_start(start: datetime, zone: tzinfo) -> str:
    """``Sat Mar 1, 9:00 PM EST``"""
    local = start.astimezone(zone)
    return f"{local:%a %b} {local.day}, {_clock(local)} {local.tzname() or ''}".rstrip()


def format_countdown(start: datetime, now: datetime) -> str:
    """Relative time like ``in 1d 2h 5m`` or ``3h 10m ago``."""
    delta = start - now
    seconds = int(delta.total_seconds())
    if seconds >= 0:
        minutes = seconds // 60
        days, rem = divmod(minutes, 24 * 60)
        hours, mins = divmod(rem, 60)
        if days:
            return f"in {days}d {hours}h {mins}m"
        if hours:
            return f"in {hours}h {mins}m"
        return f"in {mins}m"
    minutes = -seconds // 60
    hours, mins = divmod(minutes, 60)
    if hours:
        return f"{hours}h {mins}m ago"
    return f"{mins}m ago"


def primary_event_url(event: Event) -> str:
    """Best link for the embed title: an event/gamecast/preview page, else the first link."""
    for link in event.links:
        title = link.title.strip().lower()
        if link.url.strip() and (
            title in ("event page", "gamecast") or "preview" in title or "event" in title
        ):
            return link.url
    return event.links[0].url if event.links else ""


def format_bouts(bouts: Sequence[Bout], zone: tzinfo) -> str:
    if not bouts:
        return "—"
    lines = []
    for b in bouts:
        line = f"{b.red_name.strip()} vs {b.blue_name.strip()}".strip()
        if b.weight_class.strip():
            line += f" — {b.weight_class.strip()}"
        if b.scheduled is not None:
            line += f" — {_clock(b.scheduled.astimezone(zone))}"
        if b.winner:
            line += f" (W: {b.winner})"
        lines.append(line)
    out = "\n".join(lines)
    if len(out) > FIELD_LIMIT:
        return out[: FIELD_LIMIT - 3] + "..."
    return out


def build_message(org: str, event: Event, zone: tzinfo) -> str:
    """Plain-text alert posted alongside the embed."""
    label = org.upper()
    return (
        f"{label} Fight Night Alert:\n"
        f"• {event.display_name} — {format_start(event.start, zone)}"
    )


def build_event_embed(org: str, tz_name: str, zone: tzinfo, event: Event) -> dict:
    """Discord embed payload with links and a main card / prelims breakdown."""
    embed: dict = {
        "title": f"{org.upper()}: {event.display_name}",
        "description": f"Starts: {format_start(event.start, zone)} ({tz_name})",
        "color": EMBED_COLOR,
        "fields": [],
    }
    url = primary_event_url(event)
    if url:
        embed["url"] = url
    if event.banner_url and event.banner_url.strip():
        embed["image"] = {"url": event.banner_url}

    link_lines = [
        f"[{link.title or f'Link {i}'}]({link.url})"
        for i, link in enumerate(event.links, start=1)
        if link.url
    ]
    if link_lines:
        embed["fields"].append({"name": "Links", "value": "\n".join(link_lines)[:FIELD_LIMIT]})

    card = build_card(event)
    if card.main_card:
        embed["fields"].append(
            {"name": "Main Card", "value": format_bouts(card.main_card, zone), "inline": False}
        )
    if card.prelims:
        embed["fields"].append(
            {"name": "Prelims", "value": format_bouts(card.prelims, zone), "inline": False}
        )
    return embed


def reminder_title(org: str, event: Event) -> str:
    return f"{org.upper()}: {event.display_name}"
