"""Defeat penalty mechanics — pure calculations, no I/O.

When the player is defeated in combat:
- HP is fully restored
- A flat currency penalty is taken, never below zero
"""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DEFEAT_PENALTY = 100


@dataclass(frozen=True)
class DefeatPenalty:
    currency_lost: int
    remaining: int
    shortfall: int

    @property
    def fully_paid(self) -> bool:
        return self.shortfall == 0


def calculate_defeat_penalty(currency: int, penalty: int = DEFAULT_DEFEAT_PENALTY) -> DefeatPenalty:
    """Take ``penalty`` coins from ``currency``, floored at zero."""
    remaining = max(0, currency - penalty)
    lost = currency - remaining
    return DefeatPenalty(currency_lost=lost, remaining=remaining, shortfall=penalty - lost)
