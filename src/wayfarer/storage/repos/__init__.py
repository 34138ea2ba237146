from __future__ import annotations

from wayfarer.storage.repos.character_repo import CharacterRepo

__all__ = [
    "CharacterRepo",
]
