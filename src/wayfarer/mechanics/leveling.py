"""XP and level scaling — pure math, no I/O."""
from __future__ import annotations

import math

XP_PER_LEVEL_STEP = 50
LEVEL_MULTIPLIER_STEP = 0.15


def level_multiplier(level: int) -> float:
    """Stat multiplier for a level: 1.0 at level 1, +0.15 per level after."""
    return 1.0 + (level - 1) * LEVEL_MULTIPLIER_STEP


def scale_stat(base: int, level: int) -> int:
    return math.floor(base * level_multiplier(level))


def xp_for_level(level: int) -> int:
    """Total XP required to reach the given level."""
    if level <= 1:
        return 0
    return level * (level - 1) * XP_PER_LEVEL_STEP


def xp_for_next_level(current_level: int) -> int:
    return xp_for_level(current_level + 1)


def level_for_xp(xp: int) -> int:
    """Highest level whose ``xp_for_level`` threshold is at most ``xp``.

    floor((1 + sqrt(1 + 8*xp/50)) / 2) is only a first guess and can
    overshoot by several levels; the thresholds decide.
    """
    if xp <= 0:
        return 1
    level = math.floor((1 + math.sqrt(1 + 8 * xp / XP_PER_LEVEL_STEP)) / 2)
    # Walk the guess onto the threshold bracket.
    while xp_for_level(level + 1) <= xp:
        level += 1
    while level > 1 and xp_for_level(level) > xp:
        level -= 1
    return max(1, level)


def experience_reward(enemy_level: int) -> int:
    """Default XP for defeating an enemy of the given level."""
    return XP_PER_LEVEL_STEP * enemy_level
