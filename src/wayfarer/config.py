"""Runtime settings loaded from config.toml."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from wayfarer.engine.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.toml"


class CombatSettings(BaseModel):
    defeat_penalty: int = Field(default=100, ge=0)
    flee_chance: float = Field(default=0.5, ge=0.0, le=1.0)
    enemy_turn_delay: float = Field(default=1.0, ge=0.0)
    telegraph_delay: float = Field(default=0.8, ge=0.0)
    recovery_delay: float = Field(default=0.5, ge=0.0)
    victory_exit_delay: float = Field(default=3.0, ge=0.0)
    flee_exit_delay: float = Field(default=1.0, ge=0.0)
    abort_exit_delay: float = Field(default=2.0, ge=0.0)
    max_encounter_size: int = Field(default=3, ge=1)


class StorageSettings(BaseModel):
    db_path: str = "saves/wayfarer.db"


class LoggingSettings(BaseModel):
    level: str = "WARNING"
    max_messages: int = Field(default=100, ge=1)


class Settings(BaseModel):
    combat: CombatSettings = Field(default_factory=CombatSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _load_config(path: Path) -> dict[str, Any]:
    """Read a TOML file; a missing file yields an empty config."""
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def load_settings(path: Path | str | None = None) -> Settings:
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    raw = _load_config(config_path)
    if not raw:
        logger.debug(f"No config at {config_path}, using defaults")
    try:
        return Settings.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {config_path}: {e}") from e
