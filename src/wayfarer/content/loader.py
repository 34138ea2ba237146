"""TOML content loading for the entity catalog."""
from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from wayfarer.models.entity import EntityDefinition

CONTENT_DIR = Path(__file__).parent


def load_toml(filepath: Path) -> dict[str, Any]:
    with open(filepath, "rb") as f:
        return tomllib.load(f)


def load_all_entities(entity_dir: Path | None = None) -> dict[str, EntityDefinition]:
    """Load every entity definition from content/entities/*.toml.

    Each TOML file holds an [[entities]] array. A later file overrides an
    earlier one when ids collide, files being read in name order.
    """
    entity_dir = entity_dir or CONTENT_DIR / "entities"
    entities: dict[str, EntityDefinition] = {}
    if not entity_dir.exists():
        return entities
    for f in sorted(entity_dir.glob("*.toml")):
        data = load_toml(f)
        for raw in data.get("entities", []):
            definition = EntityDefinition.model_validate(raw)
            entities[definition.id] = definition
    return entities
