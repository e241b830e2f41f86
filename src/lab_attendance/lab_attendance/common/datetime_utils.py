from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

_CLOCK_RE = re.compile(r"^(\d{2}):(\d{2})$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current instant in UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    # Naive values are treated as UTC, matching how instants are stored.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant ('2024-03-10T14:00:00.000Z') into aware UTC."""
    v = (value or "").strip()
    if not v:
        raise ValueError("empty instant")
    if v.endswith("Z") or v.endswith("z"):
        v = v[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(v))


def parse_local_instant(value: str, tz: ZoneInfo) -> datetime:
    """Like ``parse_instant`` but a value without an offset is wall-clock time in ``tz``."""
    v = (value or "").strip()
    if not v:
        raise ValueError("empty instant")
    if v.endswith("Z") or v.endswith("z"):
        v = v[:-1] + "+00:00"
    parsed = datetime.fromisoformat(v)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(timezone.utc)


def format_instant(value: datetime) -> str:
    """Serialize as UTC ISO-8601 with milliseconds and a trailing Z."""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_optional_instant(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return parse_instant(value)


def parse_clock_time(value: str) -> Optional[time]:
    """Parse 'HH:MM'. Returns None if the value is not in clock form."""
    m = _CLOCK_RE.match((value or "").strip())
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid clock time: {value!r}")
    return time(hour=hours, minute=minutes)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    """Calendar date of an instant as seen in the reference timezone."""
    return to_utc(instant).astimezone(tz).date()


def combine_local(day: date, clock: time, tz: ZoneInfo) -> datetime:
    """Wall-clock time on a local calendar date, converted to a UTC instant.

    The offset is resolved by zoneinfo for that specific date, so DST
    transitions are honored.
    """
    return datetime.combine(day, clock, tzinfo=tz).astimezone(timezone.utc)


def local_day_bounds(day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """[start, end) of a local calendar day as UTC instants."""
    start = combine_local(day, time(0, 0), tz)
    end = combine_local(day + timedelta(days=1), time(0, 0), tz)
    return start, end


def hours_between(start: datetime, end: datetime) -> float:
    return (to_utc(end) - to_utc(start)).total_seconds() / 3600
