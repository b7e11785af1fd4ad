"""Gamification models: stats ledger, completion events, badges"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RequirementType(str, Enum):
    """Stat a badge threshold is compared against"""
    HABITS_COMPLETED = "habits_completed"
    GOALS_COMPLETED = "goals_completed"
    STREAK = "streak"
    PERFECT_DAYS = "perfect_days"
    EARLY_COMPLETIONS = "early_completions"
    HABITS_CREATED = "habits_created"
    CONSISTENCY_STREAK = "consistency_streak"


class BadgeDefinition(BaseModel):
    """Static catalog entry"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: str
    color: str
    icon: str
    requirement: int = Field(ge=0)
    type: RequirementType
    xp_reward: int = Field(ge=0, alias="xpReward")


class EarnedBadge(BaseModel):
    """A badge the user holds; at most one per badge id"""
    model_config = ConfigDict(populate_by_name=True)

    badge_id: str = Field(alias="id")
    earned_at: Optional[datetime] = Field(default=None, alias="earnedAt")


class LevelInfo(BaseModel):
    """Position on the level curve derived from total XP"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    level: int = Field(ge=1)
    current_xp: int = Field(ge=0, alias="currentXP")
    xp_needed: int = Field(gt=0, alias="xpNeeded")

    @property
    def progress_percent(self) -> float:
        return round(self.current_xp / self.xp_needed * 100, 2)


class CompletionEvent(BaseModel):
    """Immutable record of one habit completion"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    habit_id: Optional[Union[int, str]] = Field(alias="habitId")
    habit_title: str = Field(default="", alias="habitTitle")
    completion_time: datetime = Field(alias="completionTime")
    completion_date: date = Field(alias="date")
    hour: int = Field(ge=0, le=23)
    is_early: bool = Field(alias="isEarly")
    is_on_time: bool = Field(alias="isOnTime")
    is_late: bool = Field(alias="isLate")
    xp_awarded: int = Field(default=0, ge=0, alias="xpAwarded")


class UserStats(BaseModel):
    """
    Aggregate user progress (the Stats Store document)

    total_xp is the ledger: it only grows through discrete awards and is the
    sole input of the displayed level, which is never stored.
    """
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    total_xp: int = Field(default=0, ge=0, alias="totalXP")
    streak: int = Field(default=0, ge=0)
    badges: list[EarnedBadge] = Field(default_factory=list)
    early_completions: int = Field(default=0, ge=0, alias="earlyCompletions")
    total_completions: int = Field(default=0, ge=0, alias="totalCompletions")
    last_completion_time: Optional[datetime] = Field(default=None, alias="lastCompletionTime")
    perfect_days: int = Field(default=0, ge=0, alias="perfectDays")
    habits_created: int = Field(default=0, ge=0, alias="habitsCreated")

    @property
    def badge_ids(self) -> set[str]:
        return {badge.badge_id for badge in self.badges}

    def has_badge(self, badge_id: str) -> bool:
        return badge_id in self.badge_ids


class BadgeContext(BaseModel):
    """
    Snapshot of every value a badge requirement can reference

    Several of these are not tracked in UserStats and must be derived from the
    habit/goal collections before evaluation.
    """
    habits_completed: int = 0
    goals_completed: int = 0
    streak: int = 0
    perfect_days: int = 0
    early_completions: int = 0
    habits_created: int = 0
    consistency_streak: int = 0

    def value_for(self, requirement_type) -> Optional[int]:
        """Current value for a requirement type, None if the type is unknown"""
        try:
            return getattr(self, RequirementType(requirement_type).value)
        except ValueError:
            return None
