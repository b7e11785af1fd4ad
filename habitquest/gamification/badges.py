"""Badge catalog (static, catalog order is award order)"""
from typing import Optional

from habitquest.models.gamification import BadgeDefinition, RequirementType

BADGE_CATALOG: tuple[BadgeDefinition, ...] = (
    BadgeDefinition(
        id="first_habit",
        name="First Steps",
        description="Complete your first habit",
        icon="trophy",
        color="#4caf50",
        requirement=1,
        type=RequirementType.HABITS_COMPLETED,
        xp_reward=50,
    ),
    BadgeDefinition(
        id="streak_7",
        name="Week Warrior",
        description="Maintain a 7-day streak",
        icon="flame",
        color="#ff9800",
        requirement=7,
        type=RequirementType.STREAK,
        xp_reward=100,
    ),
    BadgeDefinition(
        id="streak_30",
        name="Monthly Master",
        description="Maintain a 30-day streak",
        icon="crown",
        color="#ff5722",
        requirement=30,
        type=RequirementType.STREAK,
        xp_reward=500,
    ),
    BadgeDefinition(
        id="streak_100",
        name="Century Club",
        description="Maintain a 100-day streak",
        icon="crown",
        color="#9c27b0",
        requirement=100,
        type=RequirementType.STREAK,
        xp_reward=2000,
    ),
    BadgeDefinition(
        id="goal_completed",
        name="Goal Getter",
        description="Complete your first goal",
        icon="trophy",
        color="#2196f3",
        requirement=1,
        type=RequirementType.GOALS_COMPLETED,
        xp_reward=200,
    ),
    BadgeDefinition(
        id="perfect_week",
        name="Perfect Week",
        description="Complete all habits for 7 days straight",
        icon="check",
        color="#4caf50",
        requirement=7,
        type=RequirementType.PERFECT_DAYS,
        xp_reward=300,
    ),
    BadgeDefinition(
        id="habit_master",
        name="Habit Master",
        description="Complete 50 habits total",
        icon="trophy",
        color="#ff922b",
        requirement=50,
        type=RequirementType.HABITS_COMPLETED,
        xp_reward=1000,
    ),
    BadgeDefinition(
        id="early_bird",
        name="Early Bird",
        description="Complete 5 habits before 8 AM",
        icon="bolt",
        color="#ffc107",
        requirement=5,
        type=RequirementType.EARLY_COMPLETIONS,
        xp_reward=150,
    ),
    BadgeDefinition(
        id="consistency_king",
        name="Consistency King",
        description="Complete the same habit for 14 consecutive days",
        icon="trophy",
        color="#00bcd4",
        requirement=14,
        type=RequirementType.CONSISTENCY_STREAK,
        xp_reward=400,
    ),
    BadgeDefinition(
        id="habit_creator",
        name="Habit Creator",
        description="Create 10 different habits",
        icon="trophy",
        color="#795548",
        requirement=10,
        type=RequirementType.HABITS_CREATED,
        xp_reward=250,
    ),
)


def get_badge(badge_id: str) -> Optional[BadgeDefinition]:
    """Look up a catalog entry by id"""
    for badge in BADGE_CATALOG:
        if badge.id == badge_id:
            return badge
    return None
