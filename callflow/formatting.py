"""Timestamp parsing and display helpers shared by the board and the context renderer."""

from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo


def resolve_timezone(name: str) -> tzinfo:
    """Map a configured zone name to a tzinfo. UTC needs no tz database."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def parse_timestamp(value: str, tz: tzinfo) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware datetime in ``tz``.

    Naive values are interpreted as wall-clock time in ``tz``. Returns None
    when the value is empty, not ISO-8601, or cannot be shifted into ``tz``
    without leaving the supported year range.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return parsed.astimezone(tz)
    except (ValueError, OverflowError):
        return None


def to_iso(moment: datetime) -> str:
    """Serialize as UTC with millisecond precision, e.g. 2024-01-01T10:00:00.000Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_time(moment: datetime) -> str:
    """10:05 AM"""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"


def format_timestamp(moment: datetime) -> str:
    """Jan 1, 10:05 AM"""
    return f"{moment.strftime('%b')} {moment.day}, {format_time(moment)}"


def display_timestamp(value: str, tz: tzinfo) -> str:
    """Render a stored timestamp for humans; unparseable input is returned as-is."""
    parsed = parse_timestamp(value, tz)
    if parsed is None:
        return value
    return format_timestamp(parsed)


def display_time(value: str, tz: tzinfo) -> str:
    parsed = parse_timestamp(value, tz)
    if parsed is None:
        return value
    return format_time(parsed)
