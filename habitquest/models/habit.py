"""Habit and goal models supplied by the CRUD backend"""
import logging
from datetime import date
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from habitquest.utils.datetime_helpers import parse_date

logger = logging.getLogger(__name__)


class Habit(BaseModel):
    """
    A habit with an inclusive scheduled date range and its completion dates

    Dirty records are tolerated: unparseable start/end dates become None and
    unparseable completion entries are dropped.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[Union[int, str]] = None
    title: str = ""
    description: str = ""
    frequency: Optional[str] = None  # display label only (daily, weekly, ...)
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    completed_dates: list[date] = Field(default_factory=list, alias="completedDates")

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def lenient_date(cls, v: Any) -> Optional[date]:
        """Unparseable dates become None"""
        parsed = parse_date(v)
        if v not in (None, "") and parsed is None:
            logger.warning(f"Ignoring unparseable habit date: {v!r}")
        return parsed

    @field_validator('completed_dates', mode='before')
    @classmethod
    def normalize_completed_dates(cls, v: Any) -> list[date]:
        """Drop unparseable entries, de-duplicate and sort ascending"""
        if not v:
            return []
        if isinstance(v, (str, date)):
            v = [v]
        dates = set()
        for raw in v:
            parsed = parse_date(raw)
            if parsed is None:
                logger.warning(f"Dropping unparseable completion date: {raw!r}")
                continue
            dates.add(parsed)
        return sorted(dates)

    @property
    def has_valid_range(self) -> bool:
        return (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date >= self.start_date
        )

    @property
    def total_days(self) -> int:
        """Number of scheduled days (0 when the range is missing or inverted)"""
        if not self.has_valid_range:
            return 0
        return (self.end_date - self.start_date).days + 1

    def is_scheduled_on(self, day: date) -> bool:
        """True if day falls within [start_date, end_date]"""
        if not self.has_valid_range:
            return False
        return self.start_date <= day <= self.end_date

    def is_completed_on(self, day: date) -> bool:
        return day in self.completed_dates


class Subgoal(BaseModel):
    """Checklist item of a goal"""
    title: str = ""
    completed: bool = False


class Goal(BaseModel):
    """A goal, optionally broken into subgoals and linked to habits"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[Union[int, str]] = None
    title: str = ""
    description: str = ""
    completed: bool = False
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    subgoals: list[Subgoal] = Field(default_factory=list)
    habit_ids: list[Union[int, str]] = Field(default_factory=list, alias="habitIds")

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def lenient_date(cls, v: Any) -> Optional[date]:
        return parse_date(v)

    @field_validator('subgoals', 'habit_ids', mode='before')
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v or []
