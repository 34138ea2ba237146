"""Shared fixtures for the wayfarer test suite."""
from __future__ import annotations

import random

import pytest

from helpers.catalog import GOBLIN, HUMAN, ORC
from wayfarer.config import CombatSettings
from wayfarer.engine.combat_log import CombatLog
from wayfarer.engine.combat_session import CombatSession
from wayfarer.engine.combat_units import CombatUnitService
from wayfarer.engine.encounters import EncounterGenerator
from wayfarer.engine.entity_registry import EntityRegistry
from wayfarer.engine.scheduler import Scheduler
from wayfarer.models.character import Character, Inventory


@pytest.fixture
def seeded_rng():
    return random.Random(42)


@pytest.fixture
def registry() -> EntityRegistry:
    return EntityRegistry([HUMAN, GOBLIN, ORC])


@pytest.fixture
def units(registry, seeded_rng) -> CombatUnitService:
    return CombatUnitService(registry, seeded_rng)


@pytest.fixture
def encounters(registry, units, seeded_rng) -> EncounterGenerator:
    return EncounterGenerator(registry, units, seeded_rng)


@pytest.fixture
def hero() -> Character:
    return Character(
        id=1, name="Aria", race_id="human", level=1,
        max_hp=100, current_hp=100, attack=15,
        inventory=Inventory(currency=250),
    )


@pytest.fixture
def goblin_character() -> Character:
    return Character(id=-1, name="Goblin", race_id="goblin", level=1, max_hp=30, current_hp=30, attack=8)


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def combat_log() -> CombatLog:
    return CombatLog()


@pytest.fixture
def make_session(registry, seeded_rng, scheduler, combat_log):
    """Factory for sessions that record navigation and saved characters.

    The rng drives damage rolls, flee draws and enemy targeting alike.
    """

    def _make(rng: random.Random | None = None, **settings) -> CombatSession:
        rng = rng or seeded_rng
        units = CombatUnitService(registry, rng)
        encounters = EncounterGenerator(registry, units, rng)
        session = CombatSession(
            units, encounters, scheduler, combat_log,
            settings=CombatSettings(**settings),
            navigate=lambda dest: session.navigations.append(dest),
            save_character=lambda c: session.saved.append(c),
            rng=rng,
        )
        session.navigations = []
        session.saved = []
        return session

    return _make


@pytest.fixture
def in_memory_db(tmp_path):
    from wayfarer.storage.database import Database

    db = Database(str(tmp_path / "test.db"))
    db.initialize()
    yield db
    db.close()
