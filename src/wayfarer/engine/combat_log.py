"""Message sink for human-readable combat events."""
from __future__ import annotations

import itertools
from collections import deque
from typing import Callable, Iterator

from wayfarer.models.event import LogEntry, LogSeverity

DEFAULT_MAX_MESSAGES = 100


class CombatLog:
    """Bounded, ordered log of combat messages.

    Listeners are called with every new entry, which is how a display
    follows along without polling.
    """

    def __init__(self, max_messages: int = DEFAULT_MAX_MESSAGES) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=max_messages)
        self._ids = itertools.count(1)
        self._listeners: list[Callable[[LogEntry], None]] = []

    def add(self, message: str, severity: LogSeverity | str = LogSeverity.INFO) -> LogEntry:
        entry = LogEntry(id=next(self._ids), message=message, severity=LogSeverity(severity))
        self._entries.append(entry)
        for listener in self._listeners:
            listener(entry)
        return entry

    def subscribe(self, listener: Callable[[LogEntry], None]) -> None:
        self._listeners.append(listener)

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self._entries]

    def since(self, entry_id: int) -> list[LogEntry]:
        return [e for e in self._entries if e.id > entry_id]

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
