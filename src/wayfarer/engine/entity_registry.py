"""Entity definition registry — static catalog of races and monsters.

The registry always holds the fallback race. Construction fails without
it, and it can be replaced but never removed.
"""
from __future__ import annotations

import random
from typing import Iterable

from wayfarer.engine.errors import DefinitionNotFoundError, RegistryError
from wayfarer.models.entity import EntityCategory, EntityDefinition

FALLBACK_RACE_ID = "human"


class EntityRegistry:
    def __init__(self, definitions: Iterable[EntityDefinition]) -> None:
        self._entities: dict[str, EntityDefinition] = {}
        for definition in definitions:
            self.add(definition)
        if FALLBACK_RACE_ID not in self._entities:
            raise DefinitionNotFoundError(FALLBACK_RACE_ID)

    @classmethod
    def from_content(cls) -> EntityRegistry:
        """Build a registry from the bundled TOML catalog."""
        from wayfarer.content.loader import load_all_entities

        return cls(load_all_entities().values())

    @property
    def fallback(self) -> EntityDefinition:
        return self._entities[FALLBACK_RACE_ID]

    def add(self, definition: EntityDefinition) -> None:
        self._entities[definition.id] = definition

    def update(self, definition: EntityDefinition) -> bool:
        if definition.id not in self._entities:
            return False
        self._entities[definition.id] = definition
        return True

    def remove(self, definition_id: str) -> bool:
        if definition_id == FALLBACK_RACE_ID:
            raise RegistryError(f"'{FALLBACK_RACE_ID}' is the fallback race and cannot be removed")
        return self._entities.pop(definition_id, None) is not None

    def clear(self) -> None:
        """Drop every definition except the fallback race."""
        fallback = self.fallback
        self._entities.clear()
        self._entities[fallback.id] = fallback

    def get(self, definition_id: str) -> EntityDefinition | None:
        return self._entities.get(definition_id)

    def has(self, definition_id: str) -> bool:
        return definition_id in self._entities

    def __contains__(self, definition_id: object) -> bool:
        return definition_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def all(self) -> list[EntityDefinition]:
        return list(self._entities.values())

    def by_category(self, category: EntityCategory | str) -> list[EntityDefinition]:
        category = EntityCategory(category)
        return [e for e in self._entities.values() if e.category == category]

    def by_level_range(self, min_level: int, max_level: int) -> list[EntityDefinition]:
        return [e for e in self._entities.values() if min_level <= e.level <= max_level]

    def by_tag(self, tag: str) -> list[EntityDefinition]:
        return [e for e in self._entities.values() if tag in e.tags]

    def suitable_enemies(self, player_level: int) -> list[EntityDefinition]:
        """Monsters within [player_level - 2 (min 1), player_level + 3]."""
        return self._monsters_between(max(1, player_level - 2), player_level + 3)

    def random_suitable(
        self, min_level: int, max_level: int, rng: random.Random | None = None,
    ) -> EntityDefinition | None:
        """Uniformly pick a monster in the level range, or None if there is none."""
        monsters = self._monsters_between(min_level, max_level)
        if not monsters:
            return None
        return (rng or random).choice(monsters)

    def _monsters_between(self, min_level: int, max_level: int) -> list[EntityDefinition]:
        return [
            e for e in self.by_level_range(min_level, max_level)
            if e.category == EntityCategory.MONSTER
        ]
