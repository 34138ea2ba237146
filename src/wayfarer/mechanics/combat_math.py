"""Combat math — pure functions, no I/O."""
from __future__ import annotations

import math
import random

from wayfarer.models.combat import CombatUnit
from wayfarer.models.entity import EntityDefinition

DAMAGE_VARIANCE = 0.2
LEVEL_DAMAGE_STEP = 0.1


def calculate_damage(attacker: CombatUnit, defender: CombatUnit, rng: random.Random | None = None) -> int:
    """Damage dealt by attacker to defender (minimum 1).

    Attack is scaled by a uniform roll in [0.8, 1.2), then by 10% per level
    of difference between attacker and defender.
    """
    rng = rng or random
    roll = (1.0 - DAMAGE_VARIANCE) + rng.random() * (2 * DAMAGE_VARIANCE)
    damage = math.floor(attacker.attack * roll)
    level_modifier = 1.0 + LEVEL_DAMAGE_STEP * (attacker.level - defender.level)
    damage = math.floor(damage * level_modifier)
    return max(1, damage)


def flee_succeeds(flee_chance: float, rng: random.Random | None = None) -> bool:
    """A flee attempt succeeds when the draw lands above ``1 - flee_chance``."""
    rng = rng or random
    return rng.random() > 1.0 - flee_chance


def combat_power(definition: EntityDefinition) -> int:
    """Rough balancing score for a definition."""
    return definition.max_hp + definition.attack * 2 + definition.level * 10


def difficulty_rating(definition: EntityDefinition, player_level: int) -> str:
    """Difficulty of a definition relative to the player.

    Returns one of: 'Very Easy', 'Easy', 'Normal', 'Hard', 'Very Hard', 'Impossible'.
    """
    diff = definition.level - player_level
    if diff <= -3:
        return "Very Easy"
    if diff <= -1:
        return "Easy"
    if diff <= 1:
        return "Normal"
    if diff <= 3:
        return "Hard"
    if diff <= 5:
        return "Very Hard"
    return "Impossible"
