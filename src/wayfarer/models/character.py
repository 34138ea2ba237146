from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ItemStack(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: str
    quantity: int = Field(default=1, ge=0)


class Inventory(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: int = Field(default=0, ge=0)
    items: tuple[ItemStack, ...] = ()


class Character(BaseModel):
    """Persistent record for the player or an NPC.

    Owned by the persistence layer; combat only reads it and hands back
    updated copies.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    location: int = 0
    unit_id: int = 0
    map_id: int = 0
    shop_pools: tuple[str, ...] = ()
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)
    race_id: str = "human"
    max_hp: int = Field(default=1, ge=1)
    current_hp: int = Field(default=1, ge=0)
    attack: int = Field(default=0, ge=0)
    inventory: Inventory = Field(default_factory=Inventory)

    @model_validator(mode="after")
    def _hp_within_max(self) -> "Character":
        if self.current_hp > self.max_hp:
            raise ValueError(f"current_hp {self.current_hp} exceeds max_hp {self.max_hp}")
        return self

    @property
    def currency(self) -> int:
        return self.inventory.currency

    def with_currency(self, currency: int) -> "Character":
        return self.model_copy(
            update={"inventory": self.inventory.model_copy(update={"currency": max(0, currency)})}
        )
