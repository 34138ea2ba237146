"""Application bootstrap — wires the combat engine to storage and the terminal."""
from __future__ import annotations

import logging
import random
import time
from pathlib import Path

from wayfarer.config import Settings, load_settings
from wayfarer.engine.combat_log import CombatLog
from wayfarer.engine.combat_session import CombatSession
from wayfarer.engine.combat_units import CombatUnitService
from wayfarer.engine.encounters import EncounterGenerator
from wayfarer.engine.entity_registry import EntityRegistry
from wayfarer.engine.errors import MissingCharacterError
from wayfarer.engine.scheduler import Scheduler
from wayfarer.mechanics import leveling
from wayfarer.models.character import Character

logger = logging.getLogger(__name__)

TICK_SECONDS = 0.1


class GameApp:
    """Builds engine components on demand and runs combat in the terminal."""

    def __init__(self, settings: Settings | None = None, config_path: Path | str | None = None, seed: int | None = None):
        self.settings = settings or load_settings(config_path)
        self.rng = random.Random(seed)

        self._db = None
        self._characters = None
        self._registry: EntityRegistry | None = None
        self._display = None

    # -- Component initialization (lazy) --

    @property
    def db(self):
        if self._db is None:
            from wayfarer.storage.database import Database

            self._db = Database(self.settings.storage.db_path)
            self._db.initialize()
        return self._db

    @property
    def characters(self):
        if self._characters is None:
            from wayfarer.storage.repos import CharacterRepo

            self._characters = CharacterRepo(self.db)
        return self._characters

    @property
    def registry(self) -> EntityRegistry:
        if self._registry is None:
            self._registry = EntityRegistry.from_content()
        return self._registry

    @property
    def display(self):
        if self._display is None:
            from wayfarer.cli.combat_display import CombatDisplay

            self._display = CombatDisplay()
        return self._display

    # -- Commands --

    def create_character(self, name: str, race_id: str = "human") -> Character:
        units = CombatUnitService(self.registry, self.rng)
        definition = units.resolve_definition(race_id)
        character = Character(
            id=self.characters.next_id(),
            name=name,
            race_id=definition.id,
            max_hp=leveling.scale_stat(definition.max_hp, 1),
            current_hp=leveling.scale_stat(definition.max_hp, 1),
            attack=leveling.scale_stat(definition.attack, 1),
        )
        self.characters.save(character)
        logger.info(f"Created character {character.id}: {character.name}")
        return character

    def build_session(self, scheduler: Scheduler, log: CombatLog, navigate=None) -> CombatSession:
        units = CombatUnitService(self.registry, self.rng)
        encounters = EncounterGenerator(self.registry, units, self.rng)
        return CombatSession(
            units, encounters, scheduler, log,
            settings=self.settings.combat,
            navigate=navigate,
            save_character=self.characters.save,
            rng=self.rng,
        )

    def fight(self, character_id: int, enemy_ids: list[str] | None = None) -> str | None:
        """Run one interactive combat; returns where the player ends up."""
        scheduler = Scheduler()
        log = CombatLog(self.settings.logging.max_messages)
        log.subscribe(self.display.show_entry)
        destinations: list[str] = []
        session = self.build_session(scheduler, log, navigate=destinations.append)

        player = self.characters.get(character_id)
        enemies = self._enemy_characters(session.encounters, enemy_ids or [])
        try:
            session.start(player, enemies)
        except MissingCharacterError:
            return None

        while not destinations:
            self._wait_for(scheduler, session)
            if destinations:
                break
            if session.is_player_turn:
                self.display.show_state(session.snapshot())
                self.display.show_menu()
                self._handle_input(session, self.display.console.input("[bold cyan]> [/bold cyan]"))

        session.close()
        return destinations[0]

    def _enemy_characters(self, encounters: EncounterGenerator, enemy_ids: list[str]) -> list[Character]:
        enemies = []
        for definition_id in enemy_ids:
            definition = self.registry.get(definition_id)
            if definition is None:
                logger.warning(f"Unknown enemy id: {definition_id}")
                continue
            enemies.append(encounters.character_for(definition))
        return enemies

    @staticmethod
    def _wait_for(scheduler: Scheduler, session: CombatSession) -> None:
        """Let scheduled steps play out in real time until input is needed."""
        while scheduler.pending and not session.is_player_turn:
            time.sleep(TICK_SECONDS)
            scheduler.advance(TICK_SECONDS)

    @staticmethod
    def _handle_input(session: CombatSession, raw: str) -> None:
        choice = raw.strip().lower()
        if choice.startswith("t"):
            parts = choice.split()
            if len(parts) == 2 and parts[1].isdigit():
                index = int(parts[1]) - 1
                if 0 <= index < len(session.enemy_units):
                    session.select_target(session.enemy_units[index].id)
                    return
            session.enter_targeting()
            return
        actions = {
            "1": session.attack,
            "2": session.defend,
            "3": session.flee,
            "4": session.cycle_target,
            "5": session.forfeit,
            "c": session.confirm_target,
        }
        action = actions.get(choice)
        if action is None:
            session.log.add("Unknown command.", "warning")
            return
        action()
