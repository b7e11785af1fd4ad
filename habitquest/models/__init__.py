"""Domain models"""
from habitquest.models.habit import Habit, Goal, Subgoal
from habitquest.models.gamification import (
    BadgeContext,
    BadgeDefinition,
    CompletionEvent,
    EarnedBadge,
    LevelInfo,
    RequirementType,
    UserStats,
)

__all__ = [
    "Habit",
    "Goal",
    "Subgoal",
    "BadgeContext",
    "BadgeDefinition",
    "CompletionEvent",
    "EarnedBadge",
    "LevelInfo",
    "RequirementType",
    "UserStats",
]
