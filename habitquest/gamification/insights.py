"""
Habit and Goal Insights

Analytics shown on the dashboard and insights views:
- completion rates (per habit and overall)
- habit health score
- strengths / weaknesses and recommendations
- goal progress metrics

Every rate returns 0 when its denominator is 0. Habits with missing or
inverted dates contribute 0 scheduled days.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from habitquest.gamification.streak_system import calculate_longest_streak
from habitquest.models.habit import Goal, Habit
from habitquest.utils.datetime_helpers import today_local

logger = logging.getLogger(__name__)

STRENGTH_THRESHOLD = 70
WEAKNESS_THRESHOLD = 30
LOW_AVERAGE_THRESHOLD = 50


class HabitAnalysis(BaseModel):
    """Per-habit analytics"""
    habit_id: Optional[Any] = None
    title: str
    completion_rate: float
    longest_streak: int
    status: str  # strength, weakness, neutral


class Recommendation(BaseModel):
    """Suggestion generated from habit analysis"""
    type: str  # improvement, leverage, motivation
    title: str
    description: str
    priority: str  # high, medium
    action: str


# ============================================================================
# Habit metrics
# ============================================================================

def habit_completion_rate(habit: Habit) -> float:
    """
    Share of scheduled days with a completion, as a percentage

    Returns:
        0.0 when the habit has no usable date range
    """
    total_days = habit.total_days
    if total_days <= 0:
        return 0.0
    return len(habit.completed_dates) / total_days * 100


def overall_completion_rate(habits: Sequence[Habit]) -> int:
    """Completions over scheduled days across all habits with a usable range, rounded"""
    total_possible = 0
    total_completed = 0

    for habit in habits:
        if not habit.has_valid_range:
            continue
        total_possible += habit.total_days
        total_completed += len(habit.completed_dates)

    if total_possible == 0:
        return 0
    return round(total_completed / total_possible * 100)


def average_completion_rate(habits: Sequence[Habit]) -> float:
    if not habits:
        return 0.0
    return sum(habit_completion_rate(habit) for habit in habits) / len(habits)


def is_active(habit: Habit, as_of: date) -> bool:
    """A habit is active until the end of its end date"""
    return habit.end_date is not None and habit.end_date >= as_of


def habit_health_score(habits: Sequence[Habit], as_of: Optional[date] = None) -> int:
    """
    Composite 0-100 score

    40% weight on the share of active habits, 60% on a consistency score of
    min(100, average completion rate * 1.2).
    """
    if not habits:
        return 0
    if as_of is None:
        as_of = today_local()

    active_share = sum(1 for habit in habits if is_active(habit, as_of)) / len(habits)
    consistency_score = min(100.0, average_completion_rate(habits) * 1.2)

    return round(active_share * 40 + consistency_score * 0.6)


def analyze_habits(habits: Sequence[Habit]) -> List[HabitAnalysis]:
    """Classify each habit as a strength (>= 70%), weakness (<= 30%) or neutral"""
    analyses = []

    for habit in habits:
        rate = habit_completion_rate(habit)
        if rate >= STRENGTH_THRESHOLD:
            status = "strength"
        elif rate <= WEAKNESS_THRESHOLD:
            status = "weakness"
        else:
            status = "neutral"

        analyses.append(HabitAnalysis(
            habit_id=habit.id,
            title=habit.title,
            completion_rate=rate,
            longest_streak=calculate_longest_streak(habit.completed_dates),
            status=status,
        ))

    return analyses


def generate_recommendations(analyses: Sequence[HabitAnalysis]) -> List[Recommendation]:
    """Suggestions based on the strengths/weaknesses split"""
    recommendations = []
    strengths = [a for a in analyses if a.status == "strength"]
    weaknesses = [a for a in analyses if a.status == "weakness"]

    if weaknesses:
        recommendations.append(Recommendation(
            type="improvement",
            title="Focus on Consistency",
            description=(
                f"You have {len(weaknesses)} habits with low completion rates. "
                "Try breaking them into smaller, more manageable tasks."
            ),
            priority="high",
            action="Review and simplify difficult habits",
        ))

    if strengths:
        recommendations.append(Recommendation(
            type="leverage",
            title="Build on Your Strengths",
            description=(
                f"You're doing great with {len(strengths)} habits! "
                "Use this momentum to tackle more challenging goals."
            ),
            priority="medium",
            action="Add new habits in similar categories",
        ))

    average = sum(a.completion_rate for a in analyses) / len(analyses) if analyses else 0.0
    if average < LOW_AVERAGE_THRESHOLD:
        recommendations.append(Recommendation(
            type="motivation",
            title="Start Small",
            description=(
                "Your overall completion rate is low. Consider reducing the number "
                "of habits and focusing on building consistency."
            ),
            priority="high",
            action="Reduce habit count temporarily",
        ))

    return recommendations


def build_insights(habits: Sequence[Habit], as_of: Optional[date] = None) -> Dict[str, Any]:
    """
    Full insights payload for the insights view

    Returns:
        {
            'habit_health': int,
            'strengths': [HabitAnalysis],
            'weaknesses': [HabitAnalysis],
            'all': [HabitAnalysis],
            'recommendations': [Recommendation],
            'summary': {
                'total_habits': int,
                'active_habits': int,
                'avg_completion_rate': int,
                'best_streak': int
            }
        }
    """
    if as_of is None:
        as_of = today_local()

    analyses = analyze_habits(habits)

    return {
        "habit_health": habit_health_score(habits, as_of),
        "strengths": [a for a in analyses if a.status == "strength"],
        "weaknesses": [a for a in analyses if a.status == "weakness"],
        "all": analyses,
        "recommendations": generate_recommendations(analyses),
        "summary": {
            "total_habits": len(habits),
            "active_habits": sum(1 for habit in habits if is_active(habit, as_of)),
            "avg_completion_rate": round(sum(a.completion_rate for a in analyses) / len(analyses)) if analyses else 0,
            "best_streak": max((a.longest_streak for a in analyses), default=0),
        },
    }


# ============================================================================
# Goal metrics
# ============================================================================

def goal_progress(goal: Goal) -> float:
    """Subgoal share as a percentage, or 0/100 from the goal's own flag"""
    if not goal.subgoals:
        return 100.0 if goal.completed else 0.0
    completed = sum(1 for sub in goal.subgoals if sub.completed)
    return completed / len(goal.subgoals) * 100


def goal_overall_progress(goals: Sequence[Goal]) -> int:
    if not goals:
        return 0
    return round(sum(goal_progress(goal) for goal in goals) / len(goals))


def goal_completion_rate(goals: Sequence[Goal]) -> int:
    if not goals:
        return 0
    return round(sum(1 for goal in goals if goal.completed) / len(goals) * 100)


def goal_time_progress(goals: Sequence[Goal], as_of: Optional[date] = None) -> int:
    """
    Average elapsed share of each goal's time span, clamped to 0-100

    Goals with missing dates or a non-positive span are skipped.
    """
    if as_of is None:
        as_of = today_local()

    shares = []
    for goal in goals:
        if goal.start_date is None or goal.end_date is None:
            continue
        total = (goal.end_date - goal.start_date).days
        if total <= 0:
            continue
        elapsed = (as_of - goal.start_date).days
        shares.append(min(100.0, max(0.0, elapsed / total * 100)))

    if not shares:
        return 0
    return round(sum(shares) / len(shares))


def subgoal_completion_rate(goals: Sequence[Goal]) -> int:
    subgoals = [sub for goal in goals for sub in goal.subgoals]
    if not subgoals:
        return 0
    return round(sum(1 for sub in subgoals if sub.completed) / len(subgoals) * 100)


def build_goal_analytics(goals: Sequence[Goal], as_of: Optional[date] = None) -> Dict[str, int]:
    return {
        "overall_progress": goal_overall_progress(goals),
        "completion_rate": goal_completion_rate(goals),
        "time_progress": goal_time_progress(goals, as_of),
        "subtask_completion": subgoal_completion_rate(goals),
    }
