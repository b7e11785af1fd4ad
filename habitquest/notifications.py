"""
User-visible notifications emitted by the engine

Delivery is the embedding application's concern: it passes any callable
accepting a Notification. The default sink only logs.
"""
import logging
from typing import Callable

from pydantic import BaseModel

from habitquest.models.gamification import BadgeDefinition

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """Toast-style message"""
    title: str
    message: str
    color: str = "blue"
    auto_close_ms: int = 3000


NotificationSink = Callable[[Notification], None]


def log_notification(notification: Notification) -> None:
    """Default sink"""
    logger.info(f"[notification] {notification.title}: {notification.message}")


def completion_notification(habit_title: str, xp_gained: int) -> Notification:
    return Notification(
        title="Habit Completed! 🎉",
        message=f'Great job completing "{habit_title}"! +{xp_gained} XP',
        color="green",
        auto_close_ms=3000,
    )


def badge_notification(badge: BadgeDefinition) -> Notification:
    return Notification(
        title=f"🏆 {badge.name} Achievement!",
        message=f"{badge.description} (+{badge.xp_reward} XP)",
        color="orange",
        auto_close_ms=5000,
    )
