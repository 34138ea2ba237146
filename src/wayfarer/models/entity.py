from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityCategory(str, Enum):
    RACE = "race"
    MONSTER = "monster"


class EntityDefinition(BaseModel):
    """Static archetype a combatant's stats are scaled from."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    level: int = Field(default=1, ge=1)
    max_hp: int = Field(ge=1)
    attack: int = Field(ge=0)
    category: EntityCategory
    description: str = ""
    tags: tuple[str, ...] = ()
    experience_reward: Optional[int] = None
    money_reward: Optional[int] = None
