"""
Streak and Perfect-Day Calculators

Pure functions over habit completion dates:
- current streak: consecutive days (ending today) with ANY habit completed
- per-habit current streak: consecutive days (ending today) for one habit
- longest streak: longest run of consecutive dates within one habit
- consistency streak: longest streak across all habits
- perfect days: days in a trailing window where EVERY scheduled habit was done

Backward walks are capped at STREAK_LOOKBACK_DAYS so corrupted data can
never loop unbounded.
"""

from typing import Iterable, Optional, Sequence
from datetime import date, timedelta
import logging

from habitquest.config import PERFECT_DAYS_WINDOW, STREAK_LOOKBACK_DAYS
from habitquest.models.habit import Habit
from habitquest.utils.datetime_helpers import iter_days_back, today_local

logger = logging.getLogger(__name__)


def calculate_current_streak(
    habits: Sequence[Habit],
    as_of: Optional[date] = None,
    max_days: int = STREAK_LOOKBACK_DAYS
) -> int:
    """
    Count consecutive days, ending at as_of, with at least one completion

    Args:
        habits: Habits to scan
        as_of: Last day of the streak (defaults to today)
        max_days: Cap on the backward walk

    Returns:
        Streak length in days (0 for no habits or no completion on as_of)
    """
    if not habits:
        return 0
    if as_of is None:
        as_of = today_local()

    completed = set()
    for habit in habits:
        completed.update(habit.completed_dates)

    streak = 0
    for day in iter_days_back(as_of, max_days):
        if day not in completed:
            break
        streak += 1

    if streak == max_days:
        logger.warning(f"Streak walk hit the {max_days}-day cap")

    return streak


def calculate_habit_streak(
    habit: Habit,
    as_of: Optional[date] = None,
    max_days: int = STREAK_LOOKBACK_DAYS
) -> int:
    """Consecutive days, ending at as_of, on which this habit was completed"""
    return calculate_current_streak([habit], as_of=as_of, max_days=max_days)


def calculate_longest_streak(completed_dates: Iterable[date]) -> int:
    """
    Longest run of strictly consecutive calendar dates

    Returns:
        0 for no dates, 1 when no two dates are adjacent
    """
    longest = 0
    current = 0
    previous = None

    for day in sorted(set(completed_dates)):
        if previous is not None and day - previous == timedelta(days=1):
            current += 1
        else:
            current = 1
        longest = max(longest, current)
        previous = day

    return longest


def calculate_consistency_streak(habits: Sequence[Habit]) -> int:
    """Longest single-habit run of consecutive completions across all habits"""
    if not habits:
        return 0
    return max(calculate_longest_streak(habit.completed_dates) for habit in habits)


def calculate_perfect_days(
    habits: Sequence[Habit],
    window_days: int = PERFECT_DAYS_WINDOW,
    as_of: Optional[date] = None
) -> int:
    """
    Count days in the trailing window on which every scheduled habit was done

    Days with no scheduled habit are skipped (never perfect). Habits with a
    missing or inverted date range are never scheduled.

    Returns:
        Count in [0, window_days]
    """
    if not habits or window_days <= 0:
        return 0
    if as_of is None:
        as_of = today_local()

    perfect_days = 0
    for day in iter_days_back(as_of, window_days):
        scheduled = [habit for habit in habits if habit.is_scheduled_on(day)]
        if not scheduled:
            continue
        if all(habit.is_completed_on(day) for habit in scheduled):
            perfect_days += 1

    return perfect_days


def format_streak_display(streak: int, best_streak: int = 0) -> str:
    """
    Format streak for display

    Returns:
        One-line summary, e.g. "🔥 5-day streak (best: 9)"
    """
    if streak <= 0:
        return "No active streak yet. Complete a habit today to start one! 💪"

    line = f"🔥 {streak}-day streak"
    if best_streak > streak:
        line += f" (best: {best_streak})"
    return line
