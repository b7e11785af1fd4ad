"""
Badge Evaluator

Compares a snapshot of the user's progress against the badge catalog.

Features:
- Context building from the stats ledger plus habit/goal collections
- Pure evaluation (which badges newly qualify)
- Award mode (records badges and adds their XP in one pass)
- Progress tracking for locked badges

Award order is catalog order. A badge is earned at most once.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from datetime import date, datetime, timezone
import logging

from pydantic import ValidationError as PydanticValidationError

from habitquest.gamification.badges import BADGE_CATALOG
from habitquest.gamification.streak_system import (
    calculate_consistency_streak,
    calculate_current_streak,
    calculate_perfect_days,
)
from habitquest.gamification.xp_system import award_xp, calculate_level_from_xp
from habitquest.models.gamification import (
    BadgeContext,
    BadgeDefinition,
    EarnedBadge,
    UserStats,
)
from habitquest.models.habit import Goal, Habit

logger = logging.getLogger(__name__)

CatalogEntry = Union[BadgeDefinition, Dict[str, Any]]


def build_badge_context(
    stats: UserStats,
    habits: Optional[Sequence[Habit]] = None,
    goals: Optional[Sequence[Goal]] = None,
    as_of: Optional[date] = None
) -> BadgeContext:
    """
    Populate every requirement value for evaluation

    Values not tracked in the ledger are derived from the collections when
    they are supplied; otherwise the cached stats counters are used.

    Args:
        stats: Current stats ledger
        habits: Habits from the CRUD backend (optional)
        goals: Goals from the CRUD backend (optional)
        as_of: Day the streak/perfect-day windows end on (defaults to today)

    Returns:
        BadgeContext snapshot
    """
    context = BadgeContext(
        habits_completed=stats.total_completions,
        streak=stats.streak,
        perfect_days=stats.perfect_days,
        early_completions=stats.early_completions,
        habits_created=stats.habits_created,
    )

    if habits is not None:
        recorded_dates = sum(len(habit.completed_dates) for habit in habits)
        context.habits_completed = max(stats.total_completions, recorded_dates)
        context.streak = calculate_current_streak(habits, as_of=as_of)
        context.perfect_days = calculate_perfect_days(habits, as_of=as_of)
        context.habits_created = len(habits)
        context.consistency_streak = calculate_consistency_streak(habits)

    if goals is not None:
        context.goals_completed = sum(1 for goal in goals if goal.completed)

    return context


def _coerce_badge(entry: CatalogEntry) -> Optional[BadgeDefinition]:
    """Accept catalog entries as models or raw dicts; invalid entries never qualify"""
    if isinstance(entry, BadgeDefinition):
        return entry
    try:
        return BadgeDefinition.model_validate(entry)
    except PydanticValidationError as e:
        badge_id = entry.get("id", "?") if isinstance(entry, Mapping) else getattr(entry, "id", "?")
        logger.warning(f"Skipping invalid badge definition {badge_id!r}: {e.error_count()} error(s)")
        return None


def evaluate_badges(
    stats: UserStats,
    context: Optional[BadgeContext] = None,
    catalog: Sequence[CatalogEntry] = BADGE_CATALOG
) -> List[BadgeDefinition]:
    """
    Find catalog badges the user newly qualifies for (no mutation)

    Args:
        stats: Stats ledger (supplies the already-earned badge ids)
        context: Requirement values (defaults to the ledger's own counters)
        catalog: Badge catalog in award order

    Returns:
        Newly qualifying badges in catalog order
    """
    if context is None:
        context = build_badge_context(stats)

    earned_ids = stats.badge_ids
    newly_qualified = []

    for entry in catalog:
        badge = _coerce_badge(entry)
        if badge is None or badge.id in earned_ids:
            continue

        current_value = context.value_for(badge.type)
        if current_value is None:
            continue

        if current_value >= badge.requirement:
            newly_qualified.append(badge)
            # Guards duplicate ids inside one catalog
            earned_ids = earned_ids | {badge.id}

    return newly_qualified


def award_badges(
    stats: UserStats,
    context: Optional[BadgeContext] = None,
    catalog: Sequence[CatalogEntry] = BADGE_CATALOG,
    earned_at: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Evaluate and award badges, mutating stats

    All rewards are summed and added to the ledger in one award, so the
    level is recomputed once for the whole pass.

    Returns:
        {
            'badges': [newly earned BadgeDefinition],
            'xp_awarded': int,
            'old_level': int,
            'new_level': int,
            'leveled_up': bool
        }
    """
    newly_earned = evaluate_badges(stats, context, catalog)
    if not newly_earned:
        level = calculate_level_from_xp(stats.total_xp).level
        return {
            "badges": [],
            "xp_awarded": 0,
            "old_level": level,
            "new_level": level,
            "leveled_up": False,
        }

    if earned_at is None:
        earned_at = datetime.now(timezone.utc)

    for badge in newly_earned:
        stats.badges = stats.badges + [EarnedBadge(badge_id=badge.id, earned_at=earned_at)]
        logger.info(f"Unlocked badge: {badge.id} ({badge.name}) +{badge.xp_reward} XP")

    total_reward = sum(badge.xp_reward for badge in newly_earned)
    xp_result = award_xp(stats, total_reward, reason=f"{len(newly_earned)} badge(s)")

    return {
        "badges": newly_earned,
        "xp_awarded": total_reward,
        "old_level": xp_result["old_level"],
        "new_level": xp_result["new_level"],
        "leveled_up": xp_result["leveled_up"],
    }


def get_badge_progress(
    stats: UserStats,
    context: Optional[BadgeContext] = None,
    catalog: Sequence[CatalogEntry] = BADGE_CATALOG
) -> Dict[str, Any]:
    """
    Get every badge with its unlock state and progress

    Returns:
        {
            'unlocked': [badge progress dicts],
            'locked': [badge progress dicts],
            'total_unlocked': int,
            'total_badges': int,
            'total_xp_from_badges': int
        }
    """
    if context is None:
        context = build_badge_context(stats)

    earned_ids = stats.badge_ids
    unlocked = []
    locked = []
    total_xp = 0

    for entry in catalog:
        badge = _coerce_badge(entry)
        if badge is None:
            continue

        current_value = context.value_for(badge.type) or 0
        if badge.requirement > 0:
            percent = min(100.0, round(current_value / badge.requirement * 100, 1))
        else:
            percent = 100.0

        item = {
            "id": badge.id,
            "name": badge.name,
            "description": badge.description,
            "icon": badge.icon,
            "color": badge.color,
            "xp_reward": badge.xp_reward,
            "current_value": current_value,
            "requirement": badge.requirement,
            "progress_percent": percent,
        }

        if badge.id in earned_ids:
            unlocked.append(item)
            total_xp += badge.xp_reward
        else:
            locked.append(item)

    # Closest to unlocking first
    locked.sort(key=lambda x: x["progress_percent"], reverse=True)

    return {
        "unlocked": unlocked,
        "locked": locked,
        "total_unlocked": len(unlocked),
        "total_badges": len(unlocked) + len(locked),
        "total_xp_from_badges": total_xp,
    }


def format_badge_display(progress: Dict[str, Any]) -> str:
    """
    Format badge progress for a text dashboard

    Args:
        progress: Output of get_badge_progress()
    """
    lines = [f"🏆 BADGES {progress['total_unlocked']}/{progress['total_badges']}\n"]

    for item in progress["unlocked"]:
        lines.append(f"✅ {item['name']}: {item['description']}")

    for item in progress["locked"][:3]:
        lines.append(
            f"🔒 {item['name']}: {item['current_value']}/{item['requirement']} "
            f"({item['progress_percent']:.0f}%)"
        )

    return "\n".join(lines)
