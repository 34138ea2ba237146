"""Turn-based combat session — the player/enemy state machine.

A session moves PLAYER_TURN -> ENEMY_TURN -> PLAYER_TURN until one side is
wiped (VICTORY / DEFEAT), the player escapes (FLED), gives up (FORFEITED),
or the encounter never starts (ABORTED). The end of combat is checked after
every single unit action.

Enemy turns are a chain of scheduled steps on a ``Scheduler``: each living
enemy telegraphs, strikes, then recovers before the next one acts. Every
step is tied to the session's current epoch, so forfeiting or closing the
session turns any step that still fires into a no-op.

Rosters are tuples that are replaced wholesale on every change; a caller
holding an older snapshot never sees a half-updated unit.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, Sequence

from wayfarer.config import CombatSettings
from wayfarer.engine.combat_log import CombatLog
from wayfarer.engine.combat_units import CombatUnitService
from wayfarer.engine.encounters import EncounterGenerator
from wayfarer.engine.errors import CombatSessionError, MissingCharacterError
from wayfarer.engine.scheduler import ScheduledCall, Scheduler
from wayfarer.engine.settlement import Settlement, settle_defeat, settle_flee, settle_victory
from wayfarer.mechanics.combat_math import flee_succeeds
from wayfarer.models.character import Character
from wayfarer.models.combat import CombatPhase, CombatSnapshot, CombatUnit
from wayfarer.models.event import LogSeverity

logger = logging.getLogger(__name__)

EXPLORE = "explore"
JOURNEY = "journey"

Navigator = Callable[[str], None]
CharacterSaver = Callable[[Character], None]


def _replace(roster: tuple[CombatUnit, ...], updated: CombatUnit) -> tuple[CombatUnit, ...]:
    return tuple(updated if u.id == updated.id else u for u in roster)


class CombatSession:
    def __init__(
        self,
        units: CombatUnitService,
        encounters: EncounterGenerator,
        scheduler: Scheduler,
        log: CombatLog,
        *,
        settings: CombatSettings | None = None,
        navigate: Navigator | None = None,
        save_character: CharacterSaver | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.units = units
        self.encounters = encounters
        self.scheduler = scheduler
        self.log = log
        self.settings = settings or CombatSettings()
        self._navigator = navigate
        self._save_character = save_character
        self.rng = rng or units.rng

        self.phase: CombatPhase | None = None
        self.player_character: Character | None = None
        self.player_units: tuple[CombatUnit, ...] = ()
        self.enemy_units: tuple[CombatUnit, ...] = ()
        self.selected_player_id: int | None = None
        self.selected_enemy_id: int | None = None
        self.targeting = False
        self.acting_enemy_id: int | None = None
        self.settlement: Settlement | None = None
        self.destination: str | None = None

        self._epoch = 0
        self._handles: list[ScheduledCall] = []
        self._closed = False

    # -- Lifecycle --

    def start(self, player: Character | None, enemy_characters: Sequence[Character] | None = None) -> CombatPhase:
        """Build both rosters and hand the first turn to the player.

        Without ``enemy_characters`` a random encounter is rolled. If no
        suitable enemies exist the session ends ABORTED and navigates back.
        """
        if self.phase is not None:
            raise CombatSessionError("Combat session already started")
        if player is None:
            self.phase = CombatPhase.ABORTED
            self.log.add("Player character not found! Returning to journey.", LogSeverity.ERROR)
            logger.error("Cannot start combat without a player character")
            raise MissingCharacterError("Player character not found")

        self.player_character = player
        player_unit = self.units.create_unit(player, is_player=True)
        self.player_units = (player_unit,)
        self.selected_player_id = player_unit.id

        if enemy_characters:
            enemies = self.units.create_units(enemy_characters)
            self.log.add(f"Combat encounter: {', '.join(e.name for e in enemy_characters)}!", LogSeverity.WARNING)
        else:
            size = self.encounters.roll_encounter_size(self.settings.max_encounter_size)
            enemies = self.encounters.generate(player.level, size)
            if not enemies:
                self.phase = CombatPhase.ABORTED
                self.log.add("No suitable enemies found for your level. Returning to journey.", LogSeverity.INFO)
                self._schedule(self.settings.abort_exit_delay, lambda: self._navigate(JOURNEY), "abort exit")
                return self.phase
            self.log.add(f"Random encounter: {', '.join(e.name for e in enemies)}!", LogSeverity.WARNING)

        self.enemy_units = tuple(enemies)
        self.selected_enemy_id = enemies[0].id
        self.phase = CombatPhase.PLAYER_TURN
        self.log.add("Combat encounter started! Select your actions.", LogSeverity.INFO)
        logger.info(f"Combat started: {player.name} vs {len(enemies)} enemies")
        return self.phase

    def close(self) -> None:
        """Scene change: drop every pending step without navigating."""
        self._cancel_pending()
        self._closed = True
        if self.phase is not None and not self.phase.is_terminal:
            self.phase = CombatPhase.ABORTED
        logger.info("Combat session closed")

    # -- Views --

    @property
    def is_player_turn(self) -> bool:
        return self.phase == CombatPhase.PLAYER_TURN and not self._closed

    @property
    def is_over(self) -> bool:
        return self.phase is not None and self.phase.is_terminal

    @property
    def selected_player(self) -> CombatUnit | None:
        return self._find(self.player_units, self.selected_player_id)

    @property
    def selected_enemy(self) -> CombatUnit | None:
        return self._find(self.enemy_units, self.selected_enemy_id)

    @property
    def living_enemies(self) -> list[CombatUnit]:
        return [u for u in self.enemy_units if u.is_alive]

    def snapshot(self) -> CombatSnapshot:
        return CombatSnapshot(
            phase=self.phase or CombatPhase.ABORTED,
            player_units=self.player_units,
            enemy_units=self.enemy_units,
            selected_player_id=self.selected_player_id,
            selected_enemy_id=self.selected_enemy_id,
            targeting=self.targeting,
            acting_enemy_id=self.acting_enemy_id,
        )

    # -- Targeting (never consumes the turn) --

    def enter_targeting(self) -> bool:
        if not self._check_player_turn():
            return False
        if not self.living_enemies:
            return self._reject("No enemies left to target!")
        if not (self.selected_enemy and self.selected_enemy.is_alive):
            self.selected_enemy_id = self.living_enemies[0].id
        self.targeting = True
        return True

    def cycle_target(self, step: int = 1) -> bool:
        """Move the target to the next living enemy in roster order."""
        if not self._check_player_turn():
            return False
        living = self.living_enemies
        if not living:
            return self._reject("No enemies left to target!")
        ids = [u.id for u in living]
        if self.selected_enemy_id in ids:
            index = (ids.index(self.selected_enemy_id) + step) % len(ids)
        else:
            index = 0
        self.selected_enemy_id = ids[index]
        return True

    def select_target(self, unit_id: int) -> bool:
        if not self._check_player_turn():
            return False
        unit = self._find(self.enemy_units, unit_id)
        if unit is None or not unit.is_alive:
            return self._reject("Invalid target: select a living enemy!")
        self.selected_enemy_id = unit.id
        self.targeting = False
        return True

    def confirm_target(self) -> bool:
        self.targeting = False
        return True

    def select_ally(self, unit_id: int) -> bool:
        if not self._check_player_turn():
            return False
        unit = self._find(self.player_units, unit_id)
        if unit is None or not unit.is_alive:
            return self._reject("Invalid selection: select a living ally!")
        self.selected_player_id = unit.id
        return True

    # -- Player actions --

    def attack(self) -> bool:
        if not self._check_player_turn():
            return False
        attacker = self.selected_player
        target = self.selected_enemy
        if attacker is None or target is None or not attacker.is_alive or not target.is_alive:
            return self._reject("Invalid attack: select valid units!")

        damage = self.units.calculate_damage(attacker, target)
        updated = self.units.apply_damage(target, damage)
        self.enemy_units = _replace(self.enemy_units, updated)
        self.targeting = False
        self.log.add(f"{attacker.name} attacks {target.name} for {damage} damage!", LogSeverity.INFO)

        if not updated.is_alive:
            self.log.add(f"{updated.name} has been defeated!", LogSeverity.SUCCESS)
            living = self.living_enemies
            self.selected_enemy_id = living[0].id if living else updated.id

        if self._check_combat_over():
            return True
        self._begin_enemy_turn()
        return True

    def defend(self) -> bool:
        """Takes the turn without any mechanical effect."""
        if not self._check_player_turn():
            return False
        defender = self.selected_player
        if defender is None or not defender.is_alive:
            return self._reject("Invalid defend: select a valid player unit!")
        self.log.add(f"{defender.name} takes a defensive stance!", LogSeverity.WARNING)
        self._begin_enemy_turn()
        return True

    def flee(self) -> bool:
        if not self._check_player_turn():
            return False
        if not flee_succeeds(self.settings.flee_chance, self.rng):
            self.log.add("Failed to flee! The enemies block your escape!", LogSeverity.ERROR)
            self._begin_enemy_turn()
            return True

        self._cancel_pending()
        self.phase = CombatPhase.FLED
        self.targeting = False
        logger.info(f"{self.player_character.name} fled from combat")
        player_unit = self._player_unit()
        if player_unit is not None:
            self._apply_settlement(settle_flee(self.player_character, player_unit))
        else:
            self.log.add("Successfully fled from combat!", LogSeverity.WARNING)
        self._schedule(self.settings.flee_exit_delay, lambda: self._navigate(EXPLORE), "flee exit")
        return True

    def forfeit(self) -> bool:
        """Leave immediately, without rewards, even in the middle of an enemy turn."""
        if self.phase is None or self.is_over or self._closed:
            return self._reject("Combat is already over!")
        self._cancel_pending()
        self.phase = CombatPhase.FORFEITED
        self.targeting = False
        self.acting_enemy_id = None
        self.log.add("You abandon the fight.", LogSeverity.WARNING)
        logger.info("Combat forfeited")
        self._navigate(JOURNEY)
        return True

    # -- Enemy turn --

    def _begin_enemy_turn(self) -> None:
        self.phase = CombatPhase.ENEMY_TURN
        self.targeting = False
        order = [u.id for u in self.enemy_units if u.is_alive]
        self._schedule(self.settings.enemy_turn_delay, lambda: self._telegraph(order, 0), "enemy turn")

    def _telegraph(self, order: list[int], index: int) -> None:
        if index >= len(order):
            self._end_enemy_turn()
            return
        enemy = self._find(self.enemy_units, order[index])
        if enemy is None or not enemy.is_alive:
            self._telegraph(order, index + 1)
            return
        self.acting_enemy_id = enemy.id
        self._schedule(self.settings.telegraph_delay, lambda: self._strike(order, index), f"{enemy.name} strikes")

    def _strike(self, order: list[int], index: int) -> None:
        enemy = self._find(self.enemy_units, order[index])
        targets = [u for u in self.player_units if u.is_alive]
        if enemy is not None and enemy.is_alive and targets:
            target = self.rng.choice(targets)
            damage = self.units.calculate_damage(enemy, target)
            updated = self.units.apply_damage(target, damage)
            self.player_units = _replace(self.player_units, updated)
            self.log.add(f"{enemy.name} attacks {target.name} for {damage} damage!", LogSeverity.ERROR)
            if not updated.is_alive:
                self.log.add(f"{updated.name} has been knocked out!", LogSeverity.ERROR)
            if self._check_combat_over():
                return

        self._schedule(
            self.settings.recovery_delay, lambda: self._telegraph(order, index + 1), "enemy recovery",
        )

    def _end_enemy_turn(self) -> None:
        self.acting_enemy_id = None
        if self._check_combat_over():
            return
        self.phase = CombatPhase.PLAYER_TURN
        selected = self.selected_player
        if selected is None or not selected.is_alive:
            living = [u for u in self.player_units if u.is_alive]
            self.selected_player_id = living[0].id if living else None

    # -- Resolution --

    def _check_combat_over(self) -> bool:
        result = self.units.is_combat_over(self.player_units, self.enemy_units)
        if result.is_over:
            self._resolve(result.player_won)
        return result.is_over

    def _resolve(self, player_won: bool) -> None:
        self._cancel_pending()
        self.targeting = False
        self.acting_enemy_id = None
        player_unit = self._player_unit()

        if player_won:
            self.phase = CombatPhase.VICTORY
            settlement = settle_victory(self.units, self.player_character, player_unit, self.enemy_units)
        else:
            self.phase = CombatPhase.DEFEAT
            settlement = settle_defeat(self.player_character, self.settings.defeat_penalty)
        logger.info(f"Combat resolved: {self.phase.value}")

        self._apply_settlement(settlement)
        self._schedule(self.settings.victory_exit_delay, lambda: self._navigate(EXPLORE), "combat exit")

    def _apply_settlement(self, settlement: Settlement) -> None:
        self.settlement = settlement
        self.player_character = settlement.character
        for message, severity in settlement.messages:
            self.log.add(message, severity)
        if self._save_character is not None:
            self._save_character(settlement.character)

    # -- Plumbing --

    def _check_player_turn(self) -> bool:
        if self._closed or self.phase is None or self.is_over:
            return self._reject("Combat is already over!")
        if self.phase != CombatPhase.PLAYER_TURN:
            return self._reject("It's not your turn!")
        return True

    def _reject(self, message: str) -> bool:
        self.log.add(message, LogSeverity.ERROR)
        logger.debug(f"Rejected action in phase {self.phase}: {message}")
        return False

    def _schedule(self, delay: float, step: Callable[[], None], label: str) -> None:
        epoch = self._epoch

        def guarded() -> None:
            if epoch != self._epoch or self._closed:
                logger.debug(f"Skipping stale step '{label}'")
                return
            step()

        now = self.scheduler.now
        self._handles = [h for h in self._handles if h.due > now and not h.cancelled]
        self._handles.append(self.scheduler.call_later(delay, guarded, label))

    def _cancel_pending(self) -> None:
        self._epoch += 1
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    def _navigate(self, destination: str) -> None:
        if self.destination is not None:
            return
        self.destination = destination
        if self._navigator is not None:
            self._navigator(destination)

    def _player_unit(self) -> CombatUnit | None:
        if self.player_character is None:
            return None
        for unit in self.player_units:
            if unit.character_id == self.player_character.id:
                return unit
        return None

    @staticmethod
    def _find(roster: tuple[CombatUnit, ...], unit_id: int | None) -> CombatUnit | None:
        if unit_id is None:
            return None
        for unit in roster:
            if unit.id == unit_id:
                return unit
        return None
