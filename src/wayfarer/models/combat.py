from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field, model_validator


class CombatPhase(str, Enum):
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"
    FORFEITED = "forfeited"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self not in (CombatPhase.PLAYER_TURN, CombatPhase.ENEMY_TURN)


class CombatUnit(BaseModel):
    """Ephemeral fighting snapshot of a Character for one combat session."""

    model_config = ConfigDict(frozen=True)

    id: int
    character_id: int
    name: str
    level: int
    max_hp: int
    current_hp: int
    attack: int
    race_id: str
    is_player: bool
    experience_reward: Optional[int] = None
    money_reward: Optional[int] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_alive(self) -> bool:
        return self.current_hp > 0

    @model_validator(mode="after")
    def _rewards_only_on_enemies(self) -> "CombatUnit":
        if self.is_player and (self.experience_reward is not None or self.money_reward is not None):
            raise ValueError("player-side units cannot carry rewards")
        return self


class CombatResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_over: bool
    player_won: bool = False


class CombatSnapshot(BaseModel):
    """Read-only view of a session for displays and tests."""

    model_config = ConfigDict(frozen=True)

    phase: CombatPhase
    player_units: tuple[CombatUnit, ...] = ()
    enemy_units: tuple[CombatUnit, ...] = ()
    selected_player_id: Optional[int] = None
    selected_enemy_id: Optional[int] = None
    targeting: bool = False
    acting_enemy_id: Optional[int] = None
