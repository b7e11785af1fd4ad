"""Unit tests for Completion Event Recorder (habitquest/gamification/completion.py)"""
import pytest
from datetime import date, datetime, timedelta, timezone

from habitquest.exceptions import StorageWriteError, ValidationError
from habitquest.gamification.completion import (
    apply_completion,
    build_completion_event,
    record_completion,
)
from habitquest.models.gamification import UserStats
from habitquest.models.habit import Habit
from habitquest.storage.backends import InMemoryBackend
from habitquest.storage.stats_store import StatsStore


# ============================================================================
# Classification Tests
# ============================================================================

def test_early_completion_event(drink_water):
    """Test 07:30 on 2024-01-01 is early and worth 15 XP"""
    event = build_completion_event(drink_water, datetime(2024, 1, 1, 7, 30))

    assert event.completion_date == date(2024, 1, 1)
    assert event.hour == 7
    assert event.is_early is True
    assert event.is_on_time is False
    assert event.is_late is False
    assert event.xp_awarded == 15
    assert event.habit_title == "Drink Water"


@pytest.mark.parametrize("hour,early,on_time,late,xp", [
    (0, True, False, False, 15),
    (7, True, False, False, 15),
    (8, False, True, False, 12),
    (18, False, True, False, 12),
    (19, False, False, True, 10),
    (23, False, False, True, 10),
])
def test_classification_boundaries(drink_water, hour, early, on_time, late, xp):
    """Test hour thresholds 8 and 18 are on-time"""
    event = build_completion_event(drink_water, datetime(2024, 1, 2, hour, 0))

    assert (event.is_early, event.is_on_time, event.is_late) == (early, on_time, late)
    assert event.xp_awarded == xp


def test_aware_time_converted_to_configured_timezone(drink_water):
    """Test aware instants use the local (UTC by default) hour"""
    instant = datetime(2024, 1, 2, 12, 0, tzinfo=timezone(timedelta(hours=5)))

    event = build_completion_event(drink_water, instant)

    assert event.hour == 7
    assert event.is_early is True


# ============================================================================
# Validation Tests
# ============================================================================

def test_missing_habit_rejected():
    """Test None habit is a caller error"""
    with pytest.raises(ValidationError) as exc_info:
        build_completion_event(None, datetime(2024, 1, 1, 9, 0))

    assert exc_info.value.field == "habit"


def test_habit_without_id_rejected():
    """Test habit reference must carry an id"""
    with pytest.raises(ValidationError):
        build_completion_event(Habit(title="Anonymous"), datetime(2024, 1, 1, 9, 0))


def test_completion_outside_schedule_rejected(drink_water):
    """Test dates outside [start, end] are refused"""
    with pytest.raises(ValidationError) as exc_info:
        build_completion_event(drink_water, datetime(2024, 1, 11, 9, 0))

    assert exc_info.value.field == "completion_time"


def test_schedule_check_can_be_disabled(drink_water):
    """Test enforce_schedule=False accepts any date"""
    event = build_completion_event(drink_water, datetime(2024, 2, 1, 9, 0), enforce_schedule=False)

    assert event.completion_date == date(2024, 2, 1)


def test_habit_without_range_not_range_checked():
    """Test habits with missing dates accept any completion date"""
    habit = Habit(id=5, title="Open ended")

    event = build_completion_event(habit, datetime(2030, 5, 5, 20, 0))

    assert event.is_late is True


def test_habit_dict_accepted():
    """Test raw backend records are accepted"""
    event = build_completion_event(
        {"id": 3, "title": "Stretch", "startDate": "2024-01-01", "endDate": "2024-12-31"},
        datetime(2024, 3, 1, 10, 0),
    )

    assert event.habit_id == 3


# ============================================================================
# Ledger Update Tests
# ============================================================================

def test_apply_completion_updates_counters(drink_water):
    """Test counters, last completion time and XP"""
    stats = UserStats()
    event = build_completion_event(drink_water, datetime(2024, 1, 1, 7, 30))

    apply_completion(stats, event)

    assert stats.total_completions == 1
    assert stats.early_completions == 1
    assert stats.last_completion_time == datetime(2024, 1, 1, 7, 30)
    assert stats.total_xp == 15


def test_apply_late_completion_no_early_count(drink_water):
    """Test late completion does not touch earlyCompletions"""
    stats = UserStats()
    event = build_completion_event(drink_water, datetime(2024, 1, 1, 21, 0))

    apply_completion(stats, event)

    assert stats.early_completions == 0
    assert stats.total_xp == 10


def test_record_completion_persists(store, drink_water):
    """Test recording writes both stats and history"""
    event = record_completion(store, drink_water, datetime(2024, 1, 1, 7, 30))

    stats = store.load()
    history = store.load_history()

    assert stats.total_completions == 1
    assert stats.total_xp == 15
    assert history == [event]


def test_history_bounded_to_100(store):
    """Test 105 completions keep the newest 100, oldest evicted first"""
    habit = Habit(id=1, title="Daily", start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))
    start = datetime(2024, 1, 1, 9, 0)

    for index in range(105):
        record_completion(store, habit, start + timedelta(days=index))

    history = store.load_history()

    assert len(history) == 100
    assert history[0].completion_date == date(2024, 1, 6)
    assert history[-1].completion_date == (start + timedelta(days=104)).date()
    assert store.load().total_completions == 105


class StatsWriteFailingBackend(InMemoryBackend):
    """Accepts history writes but rejects the stats document"""

    def set(self, key: str, value: str) -> None:
        if key == "userGamificationStats":
            raise StorageWriteError("quota exceeded", key=key)
        super().set(key, value)


def test_failed_stats_save_leaves_no_history(drink_water):
    """Test history and stats stay in step when the stats write fails"""
    store = StatsStore(StatsWriteFailingBackend())

    with pytest.raises(StorageWriteError):
        record_completion(store, drink_water, datetime(2024, 1, 1, 7, 30))

    assert store.load().total_completions == 0
    assert store.load_history() == []
