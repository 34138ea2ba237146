"""SQLite file holding the persistent character records.

The schema is versioned with ``PRAGMA user_version``. A file written by a
newer schema is refused rather than read half-understood.
"""
from __future__ import annotations

import contextlib
import logging
import pathlib
import sqlite3
from typing import Iterator

from wayfarer.engine.errors import StorageError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_CHARACTERS_TABLE = """
CREATE TABLE IF NOT EXISTS characters (
    id            INTEGER PRIMARY KEY,
    name          TEXT NOT NULL,
    location      INTEGER NOT NULL DEFAULT 0,
    unit_id       INTEGER NOT NULL DEFAULT 0,
    map_id        INTEGER NOT NULL DEFAULT 0,
    shop_pools    TEXT NOT NULL DEFAULT '[]',
    level         INTEGER NOT NULL DEFAULT 1 CHECK (level >= 1),
    experience    INTEGER NOT NULL DEFAULT 0 CHECK (experience >= 0),
    race_id       TEXT NOT NULL DEFAULT 'human',
    max_hp        INTEGER NOT NULL CHECK (max_hp >= 1),
    current_hp    INTEGER NOT NULL CHECK (current_hp BETWEEN 0 AND max_hp),
    attack        INTEGER NOT NULL DEFAULT 0,
    inventory     TEXT NOT NULL DEFAULT '{}'
)
"""


class Database:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            if self.db_path != ":memory:":
                pathlib.Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    @property
    def schema_version(self) -> int:
        return self.connection.execute("PRAGMA user_version").fetchone()[0]

    def initialize(self) -> None:
        """Create the characters table on a fresh file; safe to call again."""
        found = self.schema_version
        if found > SCHEMA_VERSION:
            raise StorageError(
                f"{self.db_path} uses schema version {found}, this build understands up to {SCHEMA_VERSION}"
            )
        with self.transaction() as conn:
            conn.execute(_CHARACTERS_TABLE)
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        if found < SCHEMA_VERSION:
            logger.info(f"Initialized character store at {self.db_path}")

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Everything inside commits together or not at all."""
        conn = self.connection
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
