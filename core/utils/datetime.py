"""Datetime utilities for common operations."""

from datetime import datetime, date, timezone
from typing import Optional


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def parse_datetime(value: str | datetime | date | None) -> Optional[datetime]:
    """
    Parse a datetime from a query or form value.

    Accepts ISO-8601 strings (with or without a trailing ``Z``), plain dates
    and a few common layouts. Naive results are treated as UTC.

    Args:
        value: Raw value to parse

    Returns:
        Parsed datetime or None if invalid
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            dt = None
            for fmt in ("%Y-%m-%d %H:%M:%S", "%m/%d/%Y", "%d/%m/%Y"):
                try:
                    dt = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            if dt is None:
                return None

    # Make timezone aware if not already
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def add_years(dt: datetime, years: int) -> datetime:
    """Add whole years, clamping Feb 29 to Feb 28 on non-leap targets."""
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        return dt.replace(year=dt.year + years, day=28)


def isoformat(dt: datetime | None) -> Optional[str]:
    """Serialize a datetime for API responses."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")
