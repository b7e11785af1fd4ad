"""Unit tests for Stats Store (habitquest/storage/stats_store.py)"""
import json
import pytest
from datetime import date, datetime
from unittest.mock import MagicMock

from habitquest.exceptions import StorageReadError, StorageWriteError, ValidationError
from habitquest.models.gamification import CompletionEvent, EarnedBadge, UserStats
from habitquest.storage.backends import InMemoryBackend, JsonFileBackend
from habitquest.storage.stats_store import StatsStore


def _event(day: int, hour: int = 9) -> CompletionEvent:
    return CompletionEvent(
        habit_id=1,
        habit_title="Drink Water",
        completion_time=datetime(2024, 1, day, hour, 0),
        completion_date=date(2024, 1, day),
        hour=hour,
        is_early=hour < 8,
        is_on_time=8 <= hour <= 18,
        is_late=hour > 18,
        xp_awarded=12,
    )


# ============================================================================
# Load / Save Tests
# ============================================================================

def test_load_initializes_zero_state(store, backend):
    """Test first access creates and persists zeroed stats"""
    stats = store.load()

    assert stats == UserStats()
    assert json.loads(backend.get("userGamificationStats"))["totalXP"] == 0


def test_save_and_load_round_trip(store):
    """Test stats survive serialization"""
    stats = UserStats(
        total_xp=340,
        streak=3,
        badges=[EarnedBadge(badge_id="first_habit", earned_at=datetime(2024, 1, 2, 8, 0))],
        early_completions=2,
        total_completions=9,
        last_completion_time=datetime(2024, 1, 2, 8, 0),
    )

    store.save(stats)

    assert store.load() == stats


def test_corrupt_json_falls_back_to_zero_state(backend):
    """Test unreadable stats document yields fresh stats"""
    backend.set("userGamificationStats", "{not json")
    store = StatsStore(backend)

    assert store.load() == UserStats()


def test_invalid_document_falls_back_to_zero_state(backend):
    """Test schema-invalid stats document yields fresh stats"""
    backend.set("userGamificationStats", json.dumps({"totalXP": -40}))

    assert StatsStore(backend).load() == UserStats()


def test_read_failure_falls_back_to_zero_state():
    """Test backend read errors are absorbed"""
    backend = MagicMock()
    backend.get.side_effect = StorageReadError("disk gone", key="userGamificationStats")

    stats = StatsStore(backend).load()

    assert stats.total_xp == 0


def test_write_failure_propagates():
    """Test save surfaces write errors to the caller"""
    backend = MagicMock()
    backend.set.side_effect = StorageWriteError("disk full", key="userGamificationStats")

    with pytest.raises(StorageWriteError):
        StatsStore(backend).save(UserStats(total_xp=5))


def test_load_tolerates_initial_write_failure():
    """Test first access still returns stats when the initial write fails"""
    backend = MagicMock()
    backend.get.return_value = None
    backend.set.side_effect = StorageWriteError("read-only", key="userGamificationStats")

    assert StatsStore(backend).load() == UserStats()


def test_custom_keys(backend):
    """Test configurable persistence keys"""
    store = StatsStore(backend, stats_key="s", history_key="h")
    store.save(UserStats(total_xp=1))
    store.append_history(_event(1))

    assert backend.get("s") is not None
    assert backend.get("h") is not None


# ============================================================================
# Transaction Tests
# ============================================================================

def test_transaction_saves_on_success(store):
    """Test changes made in the block are persisted"""
    with store.transaction() as stats:
        stats.total_completions += 2

    assert store.load().total_completions == 2


def test_transaction_discards_on_error(store):
    """Test changes are not saved if the block raises"""
    with pytest.raises(RuntimeError):
        with store.transaction() as stats:
            stats.total_completions += 2
            raise RuntimeError("boom")

    assert store.load().total_completions == 0


# ============================================================================
# History Tests
# ============================================================================

def test_history_append_and_trim(backend):
    """Test FIFO trimming with a small limit"""
    store = StatsStore(backend, history_limit=3)

    for day in range(1, 6):
        store.append_history(_event(day))

    history = store.load_history()
    assert [event.completion_date.day for event in history] == [3, 4, 5]


def test_history_skips_invalid_entries(backend):
    """Test malformed history entries are dropped individually"""
    good = _event(1).model_dump(mode="json", by_alias=True)
    backend.set("habitCompletionHistory", json.dumps([good, {"habitId": 1}]))

    history = StatsStore(backend).load_history()

    assert len(history) == 1


def test_history_not_a_list(backend):
    """Test a non-list history document is ignored"""
    backend.set("habitCompletionHistory", json.dumps({"oops": True}))

    assert StatsStore(backend).load_history() == []


# ============================================================================
# Reset / Backup Tests
# ============================================================================

def test_reset_clears_stats_and_history(store):
    """Test reset restores the initial state"""
    store.save(UserStats(total_xp=999, total_completions=40))
    store.append_history(_event(1))

    store.reset()

    assert store.load() == UserStats()
    assert store.load_history() == []


def test_export_import_round_trip(store):
    """Test a backup restores into a fresh store"""
    store.save(UserStats(total_xp=75, total_completions=5))
    store.append_history(_event(2))
    backup = store.export_stats()

    other = StatsStore(InMemoryBackend())
    other.import_stats(json.loads(json.dumps(backup)))

    assert "exportDate" in backup
    assert other.load().total_xp == 75
    assert len(other.load_history()) == 1


def test_import_rejects_invalid_backup(store):
    """Test nothing is written when the backup is invalid"""
    store.save(UserStats(total_xp=10))

    with pytest.raises(ValidationError):
        store.import_stats({"stats": {"totalXP": "lots"}, "history": []})

    assert store.load().total_xp == 10


def test_import_rejects_non_object_backup(store):
    """Test a backup that is not a JSON object is a validation error"""
    with pytest.raises(ValidationError) as exc_info:
        store.import_stats(["not", "a", "backup"])

    assert exc_info.value.field == "backup"


# ============================================================================
# Rollback & Corrupt File Tests
# ============================================================================

class StatsWriteFailingBackend(InMemoryBackend):
    """Accepts history writes but rejects the stats document"""

    def set(self, key: str, value: str) -> None:
        if key == "userGamificationStats":
            raise StorageWriteError("quota exceeded", key=key)
        super().set(key, value)


def test_transaction_rolls_back_history_when_stats_save_fails():
    """Test history appended in a failed transaction is removed again"""
    store = StatsStore(StatsWriteFailingBackend())

    with pytest.raises(StorageWriteError):
        with store.transaction() as stats:
            store.append_history(_event(1))
            stats.total_completions += 1

    assert store.load_history() == []


def test_transaction_restores_previous_history_on_error(store):
    """Test existing history survives a block that raises"""
    store.append_history(_event(1))

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.append_history(_event(2))
            raise RuntimeError("boom")

    assert [event.completion_date for event in store.load_history()] == [date(2024, 1, 1)]


def test_undecodable_stats_file_falls_back_to_zero_state(tmp_path):
    """Test a stats file with invalid UTF-8 loads as a fresh state"""
    (tmp_path / "userGamificationStats.json").write_bytes(b"\xff\xfe\x00garbage")
    store = StatsStore(JsonFileBackend(tmp_path))

    assert store.load() == UserStats()


def test_undecodable_history_file_is_empty(tmp_path):
    """Test a history file with invalid UTF-8 loads as empty history"""
    (tmp_path / "habitCompletionHistory.json").write_bytes(b"\x80\x81")
    store = StatsStore(JsonFileBackend(tmp_path))

    assert store.load_history() == []
