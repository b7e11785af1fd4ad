"""
GamificationService - Gamification Business Logic

Composes the engine for the UI layer: records completions, refreshes the
cached derived counters, awards badges and emits notifications, all through
an explicitly injected StatsStore.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from datetime import date, datetime

from habitquest.gamification.achievement_system import (
    CatalogEntry,
    award_badges,
    build_badge_context,
    get_badge_progress,
)
from habitquest.gamification.badges import BADGE_CATALOG
from habitquest.gamification.completion import record_completion
from habitquest.gamification.insights import overall_completion_rate
from habitquest.gamification.streak_system import (
    calculate_current_streak,
    calculate_perfect_days,
    format_streak_display,
)
from habitquest.gamification.xp_system import (
    calculate_level_from_xp,
    get_level_reward,
    get_next_level_reward,
)
from habitquest.models.gamification import CompletionEvent, UserStats
from habitquest.models.habit import Goal, Habit
from habitquest.notifications import (
    Notification,
    NotificationSink,
    badge_notification,
    completion_notification,
    log_notification,
)
from habitquest.storage.stats_store import StatsStore
from habitquest.utils.datetime_helpers import today_local

logger = logging.getLogger(__name__)


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - Completion recording and XP awarding
    - Streak / perfect-day / habit-count refresh
    - Badge checking and unlocking
    - Notifications for completions and badges
    - Reset, export and import of the user's progress
    """

    def __init__(
        self,
        store: StatsStore,
        catalog: Sequence[CatalogEntry] = BADGE_CATALOG,
        notify: NotificationSink = log_notification
    ):
        """
        Initialize GamificationService.

        Args:
            store: Stats store for this user
            catalog: Badge catalog in award order
            notify: Callable receiving user-visible notifications
        """
        self.store = store
        self.catalog = catalog
        self.notify = notify
        logger.debug("GamificationService initialized")

    def _emit(self, notification: Notification) -> None:
        """Deliver a notification; a failing sink never breaks the engine"""
        try:
            self.notify(notification)
        except Exception as e:
            logger.error(f"Notification sink failed: {e}", exc_info=True)

    def _refresh_derived(
        self,
        stats: UserStats,
        habits: Sequence[Habit],
        as_of: Optional[date] = None
    ) -> None:
        stats.streak = calculate_current_streak(habits, as_of=as_of)
        stats.perfect_days = calculate_perfect_days(habits, as_of=as_of)
        stats.habits_created = len(habits)

    def get_stats(self) -> Dict[str, Any]:
        """
        Current stats with the derived level

        Returns:
            Stats document (camelCase keys) plus 'level', 'xp', 'xpNeeded'
        """
        stats = self.store.load()
        level_info = calculate_level_from_xp(stats.total_xp)

        data = stats.model_dump(mode="json", by_alias=True)
        data.update({
            "level": level_info.level,
            "xp": level_info.current_xp,
            "xpNeeded": level_info.xp_needed,
        })
        return data

    def track_habit_completion(
        self,
        habit: Union[Habit, Mapping[str, Any]],
        completion_time: Optional[datetime] = None,
        habits: Optional[Sequence[Habit]] = None,
        goals: Optional[Sequence[Goal]] = None
    ) -> Dict[str, Any]:
        """
        Record a completion, then check badges.

        Args:
            habit: Completed habit
            completion_time: Completion instant (defaults to now)
            habits: All of the user's habits, already including this
                completion; used to refresh streak-type counters
            goals: All of the user's goals, for goal badges

        Returns:
            {
                'event': CompletionEvent,
                'xp_awarded': int,     # completion + badge XP
                'badges_earned': [BadgeDefinition],
                'level_up': bool,
                'old_level': int,
                'new_level': int
            }

        Raises:
            ValidationError: Invalid habit or out-of-range completion date
            StorageWriteError: Progress could not be saved
        """
        old_level = calculate_level_from_xp(self.store.load().total_xp).level

        event = record_completion(self.store, habit, completion_time)
        self._emit(completion_notification(event.habit_title, event.xp_awarded))

        badges_result = self.check_badges(habits=habits, goals=goals)

        new_level = calculate_level_from_xp(self.store.load().total_xp).level
        result = {
            "event": event,
            "xp_awarded": event.xp_awarded + badges_result["xp_awarded"],
            "badges_earned": badges_result["badges"],
            "level_up": new_level > old_level,
            "old_level": old_level,
            "new_level": new_level,
        }

        logger.info(
            f"Gamification processed for habit completion: habit={event.habit_id}, "
            f"xp={result['xp_awarded']}, badges={len(result['badges_earned'])}"
        )

        return result

    def update_streak(self, habits: Sequence[Habit], as_of: Optional[date] = None) -> int:
        """Recompute the any-habit streak and cache it in stats if it changed"""
        current_streak = calculate_current_streak(habits, as_of=as_of)

        with self.store.transaction() as stats:
            if stats.streak != current_streak:
                stats.streak = current_streak

        return current_streak

    def refresh_derived_stats(
        self,
        habits: Sequence[Habit],
        as_of: Optional[date] = None
    ) -> UserStats:
        """Recompute streak, perfect days and habit count from the habit list"""
        with self.store.transaction() as stats:
            self._refresh_derived(stats, habits, as_of)
        return stats

    def check_badges(
        self,
        habits: Optional[Sequence[Habit]] = None,
        goals: Optional[Sequence[Goal]] = None,
        as_of: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Award every badge the user now qualifies for.

        Returns:
            award_badges() result
        """
        with self.store.transaction() as stats:
            if habits is not None:
                self._refresh_derived(stats, habits, as_of)
            context = build_badge_context(stats, habits=habits, goals=goals, as_of=as_of)
            result = award_badges(stats, context, self.catalog)

        for badge in result["badges"]:
            self._emit(badge_notification(badge))

        return result

    def get_badge_progress(
        self,
        habits: Optional[Sequence[Habit]] = None,
        goals: Optional[Sequence[Goal]] = None,
        as_of: Optional[date] = None
    ) -> Dict[str, Any]:
        stats = self.store.load()
        context = build_badge_context(stats, habits=habits, goals=goals, as_of=as_of)
        return get_badge_progress(stats, context, self.catalog)

    def get_completion_history(self) -> List[CompletionEvent]:
        return self.store.load_history()

    def reset_stats(self) -> UserStats:
        """Clear all progress (user-triggered)"""
        return self.store.reset()

    def export_stats(self) -> Dict[str, Any]:
        return self.store.export_stats()

    def import_stats(self, backup: Dict[str, Any]) -> None:
        self.store.import_stats(backup)

    def build_dashboard(
        self,
        habits: Sequence[Habit],
        as_of: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Snapshot for the dashboard header

        Returns:
            {
                'level': int,
                'xp': int,
                'xp_needed': int,
                'progress_percent': float,
                'total_xp': int,
                'streak': int,
                'streak_display': str,
                'perfect_days': int,
                'badges_earned': int,
                'completion_rate': int,
                'level_reward': str | None,
                'next_level_reward': dict | None
            }
        """
        if as_of is None:
            as_of = today_local()

        stats = self.store.load()
        level_info = calculate_level_from_xp(stats.total_xp)
        streak = calculate_current_streak(habits, as_of=as_of)

        return {
            "level": level_info.level,
            "xp": level_info.current_xp,
            "xp_needed": level_info.xp_needed,
            "progress_percent": level_info.progress_percent,
            "total_xp": stats.total_xp,
            "streak": streak,
            "streak_display": format_streak_display(streak),
            "perfect_days": calculate_perfect_days(habits, as_of=as_of),
            "badges_earned": len(stats.badges),
            "completion_rate": overall_completion_rate(habits),
            "level_reward": get_level_reward(level_info.level),
            "next_level_reward": get_next_level_reward(level_info.level),
        }
