"""Declarative economy rules shared by every service."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EconomyRules:
    """Prices, multipliers and bounds of the credit economy."""

    defense_upgrade_price: float = 200.0
    offense_upgrade_price: float = 250.0
    offense_multiplier: float = 1.5
    rank_up_cost: float = 50.0
    bonus_amount: float = 5.0
    starting_credits: float = 0.0
    min_hack_amount: float = 1.0
    max_hack_amount: float = 50.0
    allow_self_hack: bool = True
    root_rank: int = 999


DEFAULT_RULES = EconomyRules()
