"""Unit tests for Datetime Helpers (habitquest/utils/datetime_helpers.py)"""
import pytest
from datetime import datetime, date, timezone
from zoneinfo import ZoneInfo

from habitquest.utils.datetime_helpers import (
    get_timezone,
    iter_days_back,
    parse_date,
    parse_datetime,
    to_local,
)


# ============================================================================
# Timezone Tests
# ============================================================================

def test_get_timezone_valid():
    """Test resolving a valid IANA name"""
    assert get_timezone("Europe/Stockholm") == ZoneInfo("Europe/Stockholm")


def test_get_timezone_invalid_falls_back_to_utc():
    """Test invalid names fall back to UTC"""
    assert get_timezone("Not/AZone") == ZoneInfo("UTC")


def test_to_local_naive_unchanged():
    """Test naive datetimes are taken as local wall-clock time"""
    naive = datetime(2024, 1, 5, 7, 30)
    assert to_local(naive, "Asia/Tokyo") is naive


def test_to_local_converts_aware():
    """Test aware datetimes are converted"""
    utc_time = datetime(2024, 1, 5, 23, 30, tzinfo=timezone.utc)
    local = to_local(utc_time, "Asia/Tokyo")
    assert local.date() == date(2024, 1, 6)
    assert local.hour == 8


# ============================================================================
# Parsing Tests
# ============================================================================

@pytest.mark.parametrize("value,expected", [
    ("2024-01-05", date(2024, 1, 5)),
    ("2024-01-05T10:00:00.000Z", date(2024, 1, 5)),
    (date(2024, 1, 5), date(2024, 1, 5)),
    (datetime(2024, 1, 5, 23, 0), date(2024, 1, 5)),
    ("", None),
    ("yesterday", None),
    (None, None),
    (42, None),
])
def test_parse_date(value, expected):
    """Test lenient date parsing"""
    assert parse_date(value) == expected


def test_parse_datetime_with_z_suffix():
    """Test trailing Z is read as UTC"""
    parsed = parse_datetime("2024-01-05T10:00:00Z")
    assert parsed == datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)


def test_parse_datetime_invalid():
    """Test garbage becomes None"""
    assert parse_datetime("not a time") is None


def test_iter_days_back():
    """Test backward day iteration"""
    days = list(iter_days_back(date(2024, 3, 1), 3))
    assert days == [date(2024, 3, 1), date(2024, 2, 29), date(2024, 2, 28)]
