"""Tests for src/wayfarer/cli/combat_display.py."""
from __future__ import annotations

import io

import pytest
from rich.console import Console

from wayfarer.cli.combat_display import CombatDisplay, hp_bar, threat_label
from wayfarer.engine.entity_registry import EntityRegistry
from wayfarer.models.event import LogEntry, LogSeverity


@pytest.fixture
def display():
    return CombatDisplay(Console(file=io.StringIO(), width=100, color_system=None))


def _output(display: CombatDisplay) -> str:
    return display.console.file.getvalue()


class TestHpBar:
    @pytest.mark.parametrize("current, color", [(100, "green"), (50, "yellow"), (10, "red")])
    def test_color_by_fraction(self, current, color):
        assert hp_bar(current, 100).startswith(f"[{color}]")

    def test_width(self):
        bar = hp_bar(50, 100, width=10)
        assert bar.count("█") == 5
        assert bar.count("░") == 5

    def test_zero_max(self):
        assert hp_bar(0, 0).count("░") == 12


class TestThreatLabel:
    @pytest.mark.parametrize("level, label", [(1, "Low"), (3, "Medium"), (6, "High"), (15, "Extreme")])
    def test_bands(self, level, label):
        assert threat_label(level) == label


class TestCombatDisplay:
    def test_show_entry(self, display):
        display.show_entry(LogEntry(id=1, message="Goblin has been defeated!", severity=LogSeverity.SUCCESS))
        assert "Goblin has been defeated!" in _output(display)

    def test_show_state(self, display, make_session, hero, goblin_character):
        session = make_session()
        session.start(hero, [goblin_character])
        display.show_state(session.snapshot())
        out = _output(display)
        assert "Your Turn" in out
        assert "Aria" in out
        assert "Goblin" in out
        assert "30/30" in out

    def test_show_character(self, display, hero):
        display.show_character(hero)
        out = _output(display)
        assert "Aria" in out
        assert "Coins 250" in out

    def test_show_bestiary(self, display):
        display.show_bestiary(EntityRegistry.from_content().all(), 1)
        out = _output(display)
        assert "Dragon" in out
        assert "Impossible" in out
