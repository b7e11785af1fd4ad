"""
XP and Leveling System

Level curve, completion XP rules and level rewards.

Leveling Curve:
- Completing level L costs floor(100 * 1.5^(L-1)) XP
- Level 1: 100, Level 2: 150, Level 3: 225, Level 4: 337, ...

XP Award Rules:
- Habit completion: 10 XP (base)
- Early completion (before 08:00): +5 XP
- On-time completion (08:00-18:59): +2 XP
- Late completion (19:00 or later): no bonus
- Badge unlocks: the badge's own reward
"""

from typing import Optional
import logging

from habitquest.models.gamification import LevelInfo, UserStats

logger = logging.getLogger(__name__)

BASE_COMPLETION_XP = 10
EARLY_BONUS_XP = 5
ON_TIME_BONUS_XP = 2

LEVEL_REWARDS = {
    5: "Unlock habit categories",
    10: "Custom theme colors",
    15: "Advanced analytics",
    20: "Priority support",
    25: "Exclusive content",
    30: "Habit coach access",
    35: "Premium features",
    40: "Community leader status",
    45: "Expert badge",
    50: "Legendary status",
}


def xp_for_level(level: int) -> int:
    """XP required to complete the given level"""
    return int(100 * 1.5 ** (level - 1))


def calculate_level_from_xp(total_xp: int) -> LevelInfo:
    """
    Calculate level and progress from total XP

    Negative input is clamped to 0.

    Returns:
        LevelInfo(level, current_xp, xp_needed) where xp_needed is the cost of
        the current level and current_xp < xp_needed
    """
    level = 1
    xp_remaining = max(0, int(total_xp))

    while xp_remaining >= xp_for_level(level):
        xp_remaining -= xp_for_level(level)
        level += 1

    return LevelInfo(
        level=level,
        current_xp=xp_remaining,
        xp_needed=xp_for_level(level),
    )


def total_xp_for_level(level: int) -> int:
    """Cumulative XP at which the given level is first reached"""
    return sum(xp_for_level(lvl) for lvl in range(1, max(1, level)))


def get_level_info(stats: UserStats) -> LevelInfo:
    """Displayed level of a stats ledger"""
    return calculate_level_from_xp(stats.total_xp)


def calculate_xp_for_completion(is_early: bool, is_on_time: bool) -> int:
    """
    XP for one habit completion

    Early and on-time bonuses are mutually exclusive; early wins.
    """
    amount = BASE_COMPLETION_XP

    if is_early:
        amount += EARLY_BONUS_XP
    elif is_on_time:
        amount += ON_TIME_BONUS_XP

    return amount


def award_xp(stats: UserStats, amount: int, reason: str = "Habit activity") -> dict:
    """
    Add XP to the ledger and report any level change

    Args:
        stats: Stats to mutate
        amount: Non-negative XP amount
        reason: Human-readable description for the log

    Returns:
        {
            'xp_awarded': int,
            'old_total_xp': int,
            'new_total_xp': int,
            'old_level': int,
            'new_level': int,
            'leveled_up': bool
        }
    """
    if amount < 0:
        raise ValueError(f"XP awards must be non-negative, got {amount}")

    old_total_xp = stats.total_xp
    old_level = calculate_level_from_xp(old_total_xp).level

    stats.total_xp = old_total_xp + amount
    new_level = calculate_level_from_xp(stats.total_xp).level

    logger.info(f"Awarded {amount} XP for {reason}. Total: {stats.total_xp} XP, Level: {new_level}")
    if new_level > old_level:
        logger.info(f"Leveled up from {old_level} to {new_level}!")

    return {
        "xp_awarded": amount,
        "old_total_xp": old_total_xp,
        "new_total_xp": stats.total_xp,
        "old_level": old_level,
        "new_level": new_level,
        "leveled_up": new_level > old_level,
    }


def get_level_reward(level: int) -> Optional[str]:
    """Feature unlocked on reaching the given level, if any"""
    return LEVEL_REWARDS.get(level)


def get_next_level_reward(level: int) -> Optional[dict]:
    """Next reward strictly above the given level"""
    for reward_level in sorted(LEVEL_REWARDS):
        if reward_level > level:
            return {"level": reward_level, "reward": LEVEL_REWARDS[reward_level]}
    return None
