"""
Completion Event Recorder

Turns "habit marked complete" into a classified, XP-bearing event:
1. Derive calendar date and hour in the configured timezone
2. Classify early (< 08:00), on-time (08:00-18:59) or late (>= 19:00)
3. Compute XP (10 base, +5 early or +2 on-time)
4. Append to the bounded completion history
5. Update the stats ledger (counters, last completion, XP)

Notifications and badge checks are the caller's follow-up; see
GamificationService.track_habit_completion for the composite.
"""

from typing import Any, Mapping, Optional, Union
from datetime import datetime
import logging

from pydantic import ValidationError as PydanticValidationError

from habitquest.exceptions import ValidationError
from habitquest.gamification.xp_system import award_xp, calculate_xp_for_completion
from habitquest.models.gamification import CompletionEvent, UserStats
from habitquest.models.habit import Habit
from habitquest.storage.stats_store import StatsStore
from habitquest.utils.datetime_helpers import now_local, to_local

logger = logging.getLogger(__name__)

EARLY_BEFORE_HOUR = 8
LATE_AFTER_HOUR = 18


def _coerce_habit(habit: Union[Habit, Mapping[str, Any], None]) -> Habit:
    """Validate the habit reference supplied by the caller"""
    if habit is None:
        raise ValidationError("A habit is required to record a completion", field="habit", value=None)

    if not isinstance(habit, Habit):
        try:
            habit = Habit.model_validate(habit)
        except PydanticValidationError as e:
            raise ValidationError("Malformed habit record", field="habit", value=str(habit), cause=e)

    if habit.id is None:
        raise ValidationError("Habit has no id", field="habit.id", value=None)

    return habit


def build_completion_event(
    habit: Union[Habit, Mapping[str, Any]],
    completion_time: Optional[datetime] = None,
    enforce_schedule: bool = True
) -> CompletionEvent:
    """
    Classify a completion and compute its XP (no side effects)

    Args:
        habit: Completed habit
        completion_time: Completion instant (defaults to now)
        enforce_schedule: Reject dates outside the habit's [start, end] range

    Returns:
        CompletionEvent

    Raises:
        ValidationError: Missing/malformed habit or out-of-range date
    """
    habit = _coerce_habit(habit)

    if completion_time is None:
        completion_time = now_local()
    local_time = to_local(completion_time)

    completion_date = local_time.date()
    hour = local_time.hour

    # Habits without a usable range are not range-checked
    if enforce_schedule and habit.has_valid_range and not habit.is_scheduled_on(completion_date):
        raise ValidationError(
            f"Completion date {completion_date} is outside the habit's schedule "
            f"({habit.start_date} to {habit.end_date})",
            field="completion_time",
            value=completion_date.isoformat(),
        )

    is_early = hour < EARLY_BEFORE_HOUR
    is_on_time = EARLY_BEFORE_HOUR <= hour <= LATE_AFTER_HOUR
    is_late = hour > LATE_AFTER_HOUR

    return CompletionEvent(
        habit_id=habit.id,
        habit_title=habit.title,
        completion_time=completion_time,
        completion_date=completion_date,
        hour=hour,
        is_early=is_early,
        is_on_time=is_on_time,
        is_late=is_late,
        xp_awarded=calculate_xp_for_completion(is_early, is_on_time),
    )


def apply_completion(stats: UserStats, event: CompletionEvent) -> dict:
    """
    Apply a completion event to the stats ledger

    Returns:
        award_xp() result for the completion XP
    """
    stats.total_completions += 1
    if event.is_early:
        stats.early_completions += 1
    stats.last_completion_time = event.completion_time

    return award_xp(stats, event.xp_awarded, reason=f"completing '{event.habit_title}'")


def record_completion(
    store: StatsStore,
    habit: Union[Habit, Mapping[str, Any]],
    completion_time: Optional[datetime] = None,
    enforce_schedule: bool = True
) -> CompletionEvent:
    """
    Record a habit completion through the stats store

    The history append and the ledger update run inside one store
    transaction; if the ledger cannot be saved the appended event is rolled
    back so history never gets ahead of stats.

    Raises:
        ValidationError: Invalid habit reference or out-of-range date
        StorageWriteError: The store could not persist the update
    """
    event = build_completion_event(habit, completion_time, enforce_schedule)

    with store.transaction() as stats:
        store.append_history(event)
        apply_completion(stats, event)

    logger.info(
        f"Recorded completion of habit {event.habit_id} on {event.completion_date} "
        f"at hour {event.hour} (+{event.xp_awarded} XP)"
    )

    return event
