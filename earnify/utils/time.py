"""Time utility helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the zone for ``name`` (UTC when unset).

    Raises:
        ValueError: ``name`` is not a known IANA zone.
    """
    if not name or name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def local_date(value: datetime, zone: tzinfo) -> date:
    """Return the calendar date of ``value`` as seen in ``zone``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(zone).date()


def last_n_days(count: int, base: date) -> list[date]:
    """Return ``count`` consecutive dates ending at ``base``, oldest first."""
    return [base - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


def format_duration(seconds: float) -> str:
    """Format seconds into ``HH:MM:SS`` for display."""
    total = max(0, int(seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
