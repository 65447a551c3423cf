"""
Common date/time utility functions for consistent date/time handling across the package

Storage: All timestamps are stored in UTC
Reads: Every timestamp comes back tz-aware UTC, whatever the backend

Date search values follow FHIR precision:
- "2024-03-01" covers the whole day
- "2024-03" covers the whole month, "2024" the whole year
- a full date-time is a single instant
"""

from datetime import date, datetime, time, timedelta, timezone


def as_utc(dt: datetime) -> datetime:
    """
    Convert dt to tz-aware UTC.
    If dt is naive, we treat it as UTC.

    Args:
        dt: datetime object (naive or timezone-aware)

    Returns:
        datetime object in UTC timezone
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


def parse_iso_string(iso_string: str) -> datetime:
    """
    Parse an ISO 8601 string to UTC datetime.
    Handles both with and without 'Z' suffix.

    Args:
        iso_string: ISO 8601 string (e.g., "2024-12-28T10:30:00.000Z" or "2024-12-28T10:30:00+00:00")

    Returns:
        datetime object in UTC timezone
    """
    # Replace 'Z' with '+00:00' for consistent parsing
    if iso_string.endswith("Z"):
        iso_string = iso_string[:-1] + "+00:00"

    dt = datetime.fromisoformat(iso_string)
    return as_utc(dt)


def parse_search_date(value: str) -> tuple[datetime, datetime]:
    """
    Parse a FHIR date search value into a half-open UTC range [start, end).

    Args:
        value: "YYYY", "YYYY-MM", "YYYY-MM-DD" or an ISO 8601 date-time

    Returns:
        (start, end) where end is exclusive; for a date-time, end == start

    Raises:
        ValueError: the value is not a date or date-time
    """
    value = value.strip()
    if "T" in value:
        instant = parse_iso_string(value)
        return instant, instant

    parts = value.split("-")
    if len(parts) == 1 and len(parts[0]) == 4:
        year = int(parts[0])
        return _day_start(date(year, 1, 1)), _day_start(date(year + 1, 1, 1))
    if len(parts) == 2:
        year, month = int(parts[0]), int(parts[1])
        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        return _day_start(start), _day_start(end)

    day = date.fromisoformat(value)
    return _day_start(day), _day_start(day + timedelta(days=1))


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)
