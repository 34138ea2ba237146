from __future__ import annotations

import json
from typing import Any

from wayfarer.models.character import Character
from wayfarer.storage.database import Database

_JSON_FIELDS = frozenset({"shop_pools", "inventory"})


def _serialize(character: Character) -> dict:
    """Flatten a Character into column values, JSON-encoding nested fields."""
    out = character.model_dump(mode="json")
    for field in _JSON_FIELDS:
        out[field] = json.dumps(out[field])
    return out


def _deserialize(row: Any) -> Character | None:
    if row is None:
        return None
    data = dict(row)
    for field in _JSON_FIELDS:
        data[field] = json.loads(data[field])
    return Character.model_validate(data)


class CharacterRepo:
    """Repository for persistent character records."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def save(self, character: Character) -> None:
        """Insert or update a character record (UPSERT)."""
        data = _serialize(character)
        columns = ", ".join(data.keys())
        placeholders = ", ".join("?" for _ in data)
        updates = ", ".join(f"{k} = excluded.{k}" for k in data if k != "id")
        sql = (
            f"INSERT INTO characters ({columns}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}"
        )
        with self.db.transaction() as conn:
            conn.execute(sql, list(data.values()))

    def get(self, character_id: int) -> Character | None:
        with self.db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM characters WHERE id = ?", (character_id,)
            ).fetchone()
        return _deserialize(row)

    def list_all(self) -> list[Character]:
        with self.db.transaction() as conn:
            rows = conn.execute("SELECT * FROM characters ORDER BY id").fetchall()
        return [c for c in (_deserialize(r) for r in rows) if c is not None]

    def next_id(self) -> int:
        with self.db.transaction() as conn:
            row = conn.execute("SELECT COALESCE(MAX(id), 0) + 1 FROM characters").fetchone()
        return int(row[0])

    def delete(self, character_id: int) -> bool:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM characters WHERE id = ?", (character_id,))
        return cur.rowcount > 0
