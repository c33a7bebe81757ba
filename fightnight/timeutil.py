"""Time parsing and time-zone helpers.

All instants handled by the core are aware UTC datetimes. Guild-local values
(today's date, the current hour) are derived by converting those instants
into the guild's zone at the point of use, so DST transitions never shift a
stored value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo

from dateutil import tz
from dateutil.parser import isoparse

logger = logging.getLogger(__name__)

FALLBACK_RUN_HOUR = 16


def parse_api_time(value: str | None) -> datetime:
    """Parse an upstream timestamp into an aware UTC datetime.

    Accepts the RFC3339 variants ESPN emits: ``2025-03-01T02:00Z`` (no
    seconds), ``2025-03-01T02Z`` (hour only), fractional seconds, and
    ``+HH:MM`` / ``+HHMM`` offsets. Raises ``ValueError`` for empty input or
    timestamps without an offset.
    """
    if value is None or not str(value).strip():
        raise ValueError("empty time")
    dt = isoparse(str(value).strip())
    if dt.tzinfo is None:
        raise ValueError(f"timestamp without offset: {value!r}")
    return dt.astimezone(timezone.utc)


def try_parse_api_time(value: str | None) -> datetime | None:
    """Like ``parse_api_time`` but returns None instead of raising."""
    try:
        return parse_api_time(value)
    except (ValueError, OverflowError):
        return None


def parse_hhmm(value: str) -> tuple[int, int]:
    """Parse ``HH:MM`` into (hour, minute). Raises ValueError when malformed."""
    parts = (value or "").strip().split(":")
    if len(parts) != 2:
        raise ValueError("expected HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    if not 0 <= hour <= 23:
        raise ValueError("invalid hour")
    if not 0 <= minute <= 59:
        raise ValueError("invalid minute")
    return hour, minute


def target_hour(run_hour: int | None, default_run_at: str) -> int:
    """Hour (0-23) at which a guild is due.

    A valid per-guild ``run_hour`` wins; otherwise the hour component of the
    global ``HH:MM`` default is used. Minutes are ignored on purpose: ticks
    fire on the hour.
    """
    if run_hour is not None and 0 <= run_hour <= 23:
        return run_hour
    if run_hour is not None:
        logger.warning("Ignoring out-of-range run hour %r", run_hour)
    try:
        hour, _ = parse_hhmm(default_run_at)
    except ValueError:
        logger.warning("Invalid RUN_AT %r; using %02d:00", default_run_at, FALLBACK_RUN_HOUR)
        return FALLBACK_RUN_HOUR
    return hour


def load_zone(name: str | None) -> tzinfo | None:
    """Return the tzinfo for an IANA name, or None when unknown/blank."""
    if not name or not name.strip():
        return None
    return tz.gettz(name.strip())


def is_valid_zone(name: str | None) -> bool:
    return load_zone(name) is not None


@dataclass(frozen=True)
class ZoneChoice:
    """Outcome of time-zone resolution.

    ``source`` records which candidate won: ``guild``, ``default`` or
    ``local`` (system zone, used when neither name is valid).
    """
    zone: tzinfo
    name: str
    source: str


def resolve_zone(guild_tz: str | None, default_tz: str) -> ZoneChoice:
    """Resolve a guild's zone: guild override, else global default, else local."""
    zone = load_zone(guild_tz)
    if zone is not None:
        return ZoneChoice(zone=zone, name=guild_tz.strip(), source="guild")
    if guild_tz:
        logger.warning("Invalid guild time zone %r; using default %r", guild_tz, default_tz)
    zone = load_zone(default_tz)
    if zone is not None:
        return ZoneChoice(zone=zone, name=default_tz.strip(), source="default")
    logger.warning("Invalid default time zone %r; using system local", default_tz)
    return ZoneChoice(zone=tz.tzlocal(), name="Local", source="local")


def local_date(instant: datetime, zone: tzinfo) -> date:
    """Calendar date of ``instant`` as seen in ``zone``."""
    return instant.astimezone(zone).date()


def date_key(d: date) -> str:
    return d.isoformat()


def top_of_hour(instant: datetime) -> datetime:
    """Truncate an aware instant to the start of its UTC hour."""
    return instant.astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)
