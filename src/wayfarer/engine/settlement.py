"""Post-combat settlement — reconciles a finished fight into the Character."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from wayfarer.engine.combat_units import CombatUnitService
from wayfarer.mechanics.death import DEFAULT_DEFEAT_PENALTY, calculate_defeat_penalty
from wayfarer.models.character import Character
from wayfarer.models.combat import CombatUnit
from wayfarer.models.event import LogSeverity

logger = logging.getLogger(__name__)


@dataclass
class Settlement:
    character: Character
    messages: list[tuple[str, LogSeverity]] = field(default_factory=list)
    experience_gained: int = 0
    currency_delta: int = 0
    leveled_up: bool = False


def settle_victory(
    units: CombatUnitService,
    character: Character,
    player_unit: CombatUnit,
    enemy_units: Sequence[CombatUnit],
) -> Settlement:
    experience = units.experience_gain(enemy_units)
    coins = units.money_gain(enemy_units)

    updated = units.update_character_after_combat(character, player_unit, experience)
    if coins:
        updated = updated.with_currency(updated.currency + coins)

    if coins:
        text = f"Victory! You gained {experience} experience and {coins} coins!"
    else:
        text = f"Victory! You gained {experience} experience points!"
    result = Settlement(
        character=updated,
        messages=[(text, LogSeverity.SUCCESS)],
        experience_gained=experience,
        currency_delta=coins,
        leveled_up=updated.level > character.level,
    )
    if result.leveled_up:
        result.messages.append((f"Level up! You are now level {updated.level}!", LogSeverity.SUCCESS))
    return result


def settle_defeat(character: Character, penalty: int = DEFAULT_DEFEAT_PENALTY) -> Settlement:
    """Restore HP to full and take the coin penalty, reporting any shortfall."""
    outcome = calculate_defeat_penalty(character.currency, penalty)
    updated = character.model_copy(update={"current_hp": character.max_hp}).with_currency(outcome.remaining)

    messages = [
        ("Defeat! You have been knocked out...", LogSeverity.ERROR),
        (
            f"You wake up with your wounds tended, but {outcome.currency_lost} coins are missing from your purse...",
            LogSeverity.WARNING,
        ),
    ]
    if not outcome.fully_paid:
        logger.info(f"{character.name} could not cover the defeat penalty, short by {outcome.shortfall}")
        messages.append(("You didn't have enough coins to pay the full penalty!", LogSeverity.ERROR))

    return Settlement(character=updated, messages=messages, currency_delta=-outcome.currency_lost)


def settle_flee(character: Character, player_unit: CombatUnit) -> Settlement:
    """Escaping keeps whatever damage was taken."""
    current_hp = max(0, min(player_unit.current_hp, character.max_hp))
    updated = character.model_copy(update={"current_hp": current_hp})
    return Settlement(character=updated, messages=[("Successfully fled from combat!", LogSeverity.WARNING)])
