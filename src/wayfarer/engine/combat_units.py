"""Combat unit derivation — converts persistent Characters into ephemeral
CombatUnits and back, and holds the arithmetic core of a fight.

Every operation returns a fresh value; nothing here mutates a unit or a
character in place.
"""
from __future__ import annotations

import itertools
import logging
import random
from typing import Iterable

from wayfarer.engine.entity_registry import FALLBACK_RACE_ID, EntityRegistry
from wayfarer.mechanics import combat_math, leveling
from wayfarer.models.character import Character
from wayfarer.models.combat import CombatResult, CombatUnit
from wayfarer.models.entity import EntityDefinition

logger = logging.getLogger(__name__)


class CombatUnitService:
    def __init__(self, registry: EntityRegistry, rng: random.Random | None = None) -> None:
        self.registry = registry
        self.rng = rng or random.Random()
        self._ids = itertools.count(1)

    # -- Definitions --

    def resolve_definition(self, race_id: str) -> EntityDefinition:
        """Look up a race definition, falling back to ``human`` when unknown."""
        definition = self.registry.get(race_id)
        if definition is not None:
            return definition
        logger.warning(f"Race definition not found for race_id: {race_id}, falling back to {FALLBACK_RACE_ID}")
        return self.registry.fallback

    # -- Character -> CombatUnit --

    def create_unit(self, character: Character, is_player: bool = False) -> CombatUnit:
        """Derive a combat unit with racial base stats scaled by level.

        Player-side units keep their recorded stats when those beat the
        formula, and carry prior damage in. Enemies always start at full HP.
        """
        definition = self.resolve_definition(character.race_id)
        max_hp = max(leveling.scale_stat(definition.max_hp, character.level), character.max_hp)
        attack = max(leveling.scale_stat(definition.attack, character.level), character.attack)
        current_hp = min(character.current_hp, max_hp) if is_player else max_hp

        if is_player:
            experience_reward = None
            money_reward = None
        else:
            experience_reward = (
                definition.experience_reward
                if definition.experience_reward is not None
                else leveling.experience_reward(character.level)
            )
            money_reward = definition.money_reward or 0

        return CombatUnit(
            id=next(self._ids),
            character_id=character.id,
            name=character.name,
            level=character.level,
            max_hp=max_hp,
            current_hp=current_hp,
            attack=attack,
            race_id=character.race_id,
            is_player=is_player,
            experience_reward=experience_reward,
            money_reward=money_reward,
        )

    def create_units(self, characters: Iterable[Character], is_player: bool = False) -> list[CombatUnit]:
        return [self.create_unit(c, is_player) for c in characters]

    def reset_ids(self) -> None:
        self._ids = itertools.count(1)

    # -- Arithmetic --

    def calculate_damage(self, attacker: CombatUnit, defender: CombatUnit) -> int:
        return combat_math.calculate_damage(attacker, defender, self.rng)

    @staticmethod
    def apply_damage(unit: CombatUnit, damage: int) -> CombatUnit:
        new_hp = min(unit.max_hp, max(0, unit.current_hp - damage))
        return unit.model_copy(update={"current_hp": new_hp})

    @staticmethod
    def heal_unit(unit: CombatUnit, amount: int) -> CombatUnit:
        new_hp = max(0, min(unit.max_hp, unit.current_hp + amount))
        return unit.model_copy(update={"current_hp": new_hp})

    @staticmethod
    def is_combat_over(player_units: Iterable[CombatUnit], enemy_units: Iterable[CombatUnit]) -> CombatResult:
        if not any(u.is_alive for u in player_units):
            return CombatResult(is_over=True, player_won=False)
        if not any(u.is_alive for u in enemy_units):
            return CombatResult(is_over=True, player_won=True)
        return CombatResult(is_over=False)

    @staticmethod
    def experience_gain(enemy_units: Iterable[CombatUnit]) -> int:
        """Total XP over the defeated units only."""
        return sum(u.experience_reward or 0 for u in enemy_units if not u.is_alive)

    @staticmethod
    def money_gain(enemy_units: Iterable[CombatUnit]) -> int:
        return sum(u.money_reward or 0 for u in enemy_units if not u.is_alive)

    # -- CombatUnit -> Character --

    def update_character_after_combat(
        self, character: Character, unit: CombatUnit, experience_gained: int = 0,
    ) -> Character:
        """Fold combat results back into the persistent record.

        Level follows total experience. Max HP and attack are re-derived at
        the resulting level but never drop below the recorded values.
        Current HP keeps its in-combat value, it is not refilled on level-up.
        Currency is left to the caller.
        """
        experience = character.experience + max(0, experience_gained)
        level = max(character.level, leveling.level_for_xp(experience))
        definition = self.resolve_definition(character.race_id)
        max_hp = max(character.max_hp, leveling.scale_stat(definition.max_hp, level))
        attack = max(character.attack, leveling.scale_stat(definition.attack, level))
        current_hp = max(0, min(unit.current_hp, max_hp))

        if level > character.level:
            logger.info(f"{character.name} advanced from level {character.level} to {level}")

        return character.model_copy(update={
            "level": level,
            "experience": experience,
            "max_hp": max_hp,
            "attack": attack,
            "current_hp": current_hp,
        })
