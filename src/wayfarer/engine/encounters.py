"""Encounter generation — random enemy rosters suited to the player's level."""
from __future__ import annotations

import itertools
import logging
import random

from wayfarer.engine.combat_units import CombatUnitService
from wayfarer.engine.entity_registry import EntityRegistry
from wayfarer.models.character import Character
from wayfarer.models.combat import CombatUnit
from wayfarer.models.entity import EntityDefinition

logger = logging.getLogger(__name__)


class EncounterGenerator:
    def __init__(
        self,
        registry: EntityRegistry,
        units: CombatUnitService,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.units = units
        self.rng = rng or random.Random()
        # Generated enemies get negative character ids so they never collide
        # with persisted characters.
        self._enemy_ids = itertools.count(1)

    def roll_encounter_size(self, max_size: int = 3) -> int:
        return self.rng.randint(1, max(1, max_size))

    def generate_characters(self, player_level: int, encounter_size: int = 1) -> list[Character]:
        """Draw enemies with replacement from the suitable pool.

        An empty list means no encounter happens; it is not an error.
        """
        pool = self.registry.suitable_enemies(player_level)
        if not pool:
            logger.warning(f"No suitable enemies found for player level {player_level}")
            return []
        return [self.character_for(self.rng.choice(pool)) for _ in range(encounter_size)]

    def generate(self, player_level: int, encounter_size: int = 1) -> list[CombatUnit]:
        return self.units.create_units(self.generate_characters(player_level, encounter_size))

    def character_for(self, definition: EntityDefinition) -> Character:
        """Full-health enemy Character for a definition, under a fresh negative id."""
        return Character(
            id=-next(self._enemy_ids),
            name=definition.name,
            level=definition.level,
            race_id=definition.id,
            max_hp=definition.max_hp,
            current_hp=definition.max_hp,
            attack=definition.attack,
        )
