"""Exception hierarchy for the combat engine."""
from __future__ import annotations


class WayfarerError(Exception):
    """Base class for all wayfarer errors."""


class ConfigError(WayfarerError):
    """Config file exists but cannot be parsed."""


class RegistryError(WayfarerError):
    """The entity registry was asked to break its own guarantees."""


class DefinitionNotFoundError(RegistryError):
    """The registry is missing the guaranteed fallback definition."""

    def __init__(self, definition_id: str) -> None:
        super().__init__(f"Entity definition '{definition_id}' not found in registry")
        self.definition_id = definition_id


class CombatSessionError(WayfarerError):
    """A combat session was used outside its lifecycle."""


class MissingCharacterError(CombatSessionError):
    """No player character is available; the session cannot start."""


class StorageError(WayfarerError):
    """The character store cannot be opened by this build."""
