"""Upgrade Service Protocol Interface.

This module defines the protocol (interface) the combat resolver relies on
to query and consume upgrades.
"""

from typing import Protocol

from hackbank.models import DefenseUpgrade, OffenseUpgrade, Player


class IUpgradeService(Protocol):
    """Protocol defining the upgrade operations used during hack resolution."""

    def get_defense_upgrade(self, player: Player) -> DefenseUpgrade | None:
        """Return the player's defense upgrade, if any."""
        ...

    def get_offense_upgrade(self, player: Player) -> OffenseUpgrade | None:
        """Return the player's offense upgrade, if any."""
        ...

    def consume_defense_charge(self, defender: Player) -> int:
        """Spend one defense charge inside the caller's unit of work.

        Returns:
            Remaining uses; 0 means the upgrade was deleted
        """
        ...

    def apply_offense_multiplier(self, base_amount: float) -> float:
        """Scale a steal amount by the offense multiplier."""
        ...
