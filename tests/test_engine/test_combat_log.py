"""Tests for src/wayfarer/engine/combat_log.py."""
from __future__ import annotations

import pytest

from wayfarer.engine.combat_log import CombatLog
from wayfarer.models.event import LogSeverity


class TestCombatLog:
    def test_add_returns_entry(self, combat_log):
        entry = combat_log.add("Goblin attacks Aria for 8 damage!", LogSeverity.ERROR)
        assert entry.id == 1
        assert entry.severity == LogSeverity.ERROR
        assert combat_log.messages == ["Goblin attacks Aria for 8 damage!"]

    def test_severity_accepts_strings(self, combat_log):
        assert combat_log.add("ok", "success").severity == LogSeverity.SUCCESS

    def test_unknown_severity_rejected(self, combat_log):
        with pytest.raises(ValueError):
            combat_log.add("??", "fatal")

    def test_bounded_retention(self):
        log = CombatLog(max_messages=3)
        for i in range(5):
            log.add(f"m{i}")
        assert log.messages == ["m2", "m3", "m4"]
        assert len(log) == 3

    def test_ids_keep_increasing_after_eviction(self):
        log = CombatLog(max_messages=2)
        for i in range(4):
            log.add(f"m{i}")
        assert [e.id for e in log] == [3, 4]

    def test_since(self, combat_log):
        first = combat_log.add("one")
        combat_log.add("two")
        combat_log.add("three")
        assert [e.message for e in combat_log.since(first.id)] == ["two", "three"]

    def test_listeners_see_every_entry(self, combat_log):
        seen = []
        combat_log.subscribe(seen.append)
        combat_log.add("a")
        combat_log.add("b", LogSeverity.WARNING)
        assert [e.message for e in seen] == ["a", "b"]
