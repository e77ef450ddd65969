"""Time zone aware date helpers."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

SHORT_DATE_FORMAT = "%Y%m%d"


def zone(name: str) -> ZoneInfo:
    """Resolve an IANA time zone name."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown time zone: {name}") from exc


def today_in(tz_name: str, *, now: datetime | None = None) -> date:
    """Return the calendar date in the given zone."""
    current = now if now is not None else datetime.now(zone(tz_name))
    if current.tzinfo is None:
        return current.date()
    return current.astimezone(zone(tz_name)).date()


def short_date(value: date) -> str:
    """Format a date as YYYYMMDD."""
    return value.strftime(SHORT_DATE_FORMAT)


def long_date(value: date) -> str:
    """Format a date as e.g. 'Tuesday, March 17, 2015'."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def parse_event_date(value: str, *, tz_name: str | None = None) -> date | None:
    """Parse an events_date value from the upstream payload.

    The API reports `events_date` as an ISO-8601 timestamp with offset
    (2015-03-17T00:00:00-04:00); plain YYYYMMDD is accepted as well. Aware
    timestamps are converted to `tz_name` before taking the calendar date.
    """
    raw = value.strip()
    if not raw:
        return None
    if len(raw) == 8 and raw.isdigit():
        try:
            return datetime.strptime(raw, SHORT_DATE_FORMAT).date()
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is not None and tz_name:
        parsed = parsed.astimezone(zone(tz_name))
    return parsed.date()
