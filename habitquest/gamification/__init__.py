"""
Gamification engine for habitquest

This package derives progress from habit completion data:
- XP ledger and level curve
- Any-habit, per-habit and consistency streaks
- Perfect days
- Completion recording with early/on-time/late classification
- Badge evaluation and awarding
- Habit and goal insights
"""

from habitquest.gamification.xp_system import (
    calculate_level_from_xp,
    calculate_xp_for_completion,
    get_level_reward,
    xp_for_level,
)
from habitquest.gamification.streak_system import (
    calculate_consistency_streak,
    calculate_current_streak,
    calculate_habit_streak,
    calculate_longest_streak,
    calculate_perfect_days,
)
from habitquest.gamification.completion import record_completion
from habitquest.gamification.achievement_system import (
    award_badges,
    build_badge_context,
    evaluate_badges,
)
from habitquest.gamification.badges import BADGE_CATALOG

__all__ = [
    "calculate_level_from_xp",
    "calculate_xp_for_completion",
    "get_level_reward",
    "xp_for_level",
    "calculate_consistency_streak",
    "calculate_current_streak",
    "calculate_habit_streak",
    "calculate_longest_streak",
    "calculate_perfect_days",
    "record_completion",
    "award_badges",
    "build_badge_context",
    "evaluate_badges",
    "BADGE_CATALOG",
]
