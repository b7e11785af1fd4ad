"""Global test fixtures and utilities for habitquest tests"""
import pytest
from datetime import date, timedelta

from habitquest.models.habit import Goal, Habit, Subgoal
from habitquest.services.gamification_service import GamificationService
from habitquest.storage.backends import InMemoryBackend
from habitquest.storage.stats_store import StatsStore


# ============================================================================
# Dates
# ============================================================================

@pytest.fixture
def as_of():
    """Fixed 'today' used by calculator tests"""
    return date(2024, 1, 10)


@pytest.fixture
def days_back(as_of):
    """Factory: dates as_of - offset for each offset"""
    def _days_back(*offsets: int) -> list[date]:
        return [as_of - timedelta(days=offset) for offset in offsets]
    return _days_back


# ============================================================================
# Habit & Goal Fixtures
# ============================================================================

@pytest.fixture
def make_habit():
    """Factory for habits with sensible defaults"""
    counter = {"next_id": 1}

    def _make(
        title: str = "Drink Water",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 10),
        completed_dates=None,
        **kwargs
    ) -> Habit:
        habit_id = kwargs.pop("id", counter["next_id"])
        counter["next_id"] += 1
        return Habit(
            id=habit_id,
            title=title,
            start_date=start_date,
            end_date=end_date,
            completed_dates=completed_dates or [],
            **kwargs
        )

    return _make


@pytest.fixture
def drink_water(make_habit):
    """Drink Water: scheduled 2024-01-01..2024-01-10, done 01..05"""
    return make_habit(
        title="Drink Water",
        completed_dates=[date(2024, 1, day) for day in range(1, 6)],
    )


@pytest.fixture
def sample_goals():
    """One completed goal, one half-done goal"""
    return [
        Goal(id=1, title="Run a 5k", completed=True),
        Goal(
            id=2,
            title="Read 4 books",
            subgoals=[
                Subgoal(title="Book 1", completed=True),
                Subgoal(title="Book 2", completed=False),
            ],
        ),
    ]


# ============================================================================
# Store & Service Fixtures
# ============================================================================

@pytest.fixture
def backend():
    """Empty in-memory backend"""
    return InMemoryBackend()


@pytest.fixture
def store(backend):
    """Stats store over the in-memory backend"""
    return StatsStore(backend)


@pytest.fixture
def notifications():
    """List collecting emitted notifications"""
    return []


@pytest.fixture
def service(store, notifications):
    """GamificationService capturing notifications"""
    return GamificationService(store, notify=notifications.append)
