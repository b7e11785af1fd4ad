"""
Date/Time Handling Utilities

Centralizes the calendar rules the engine depends on:
1. "Today" and the hour of a completion are taken in the configured timezone
2. Naive datetimes are assumed to already be in that timezone
3. Stored dates are ISO-8601 strings (YYYY-MM-DD), instants are ISO datetimes
4. Unparseable values become None instead of raising (analytics over dirty data)
"""

import logging
from datetime import datetime, date, timedelta
from typing import Any, Iterator, Optional
from zoneinfo import ZoneInfo

from habitquest.config import TIMEZONE

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def get_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Resolve an IANA timezone name, falling back to UTC

    Args:
        tz_name: IANA name (defaults to the configured timezone)

    Returns:
        ZoneInfo object
    """
    tz_str = tz_name or TIMEZONE
    try:
        return ZoneInfo(tz_str)
    except Exception as e:
        logger.error(f"Invalid timezone '{tz_str}': {e}")
        return ZoneInfo(DEFAULT_TIMEZONE)


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current timezone-aware datetime in the configured timezone"""
    return datetime.now(get_timezone(tz_name))


def today_local(tz_name: Optional[str] = None) -> date:
    """Today's calendar date in the configured timezone"""
    return now_local(tz_name).date()


def to_local(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """
    Convert a datetime to the configured timezone

    Naive datetimes are interpreted as local wall-clock time and returned
    unchanged.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_timezone(tz_name))


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a calendar date leniently

    Accepts date objects, datetimes (date part), and ISO strings
    ("2024-01-05" or "2024-01-05T10:00:00.000Z").

    Returns:
        date, or None if the value is missing or unparseable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO datetime leniently (trailing 'Z' accepted)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def iter_days_back(as_of: date, days: int) -> Iterator[date]:
    """Yield as_of, as_of - 1, ... for `days` calendar days"""
    for offset in range(days):
        yield as_of - timedelta(days=offset)
