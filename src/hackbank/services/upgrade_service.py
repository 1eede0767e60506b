"""Upgrade Service for hackbank.

This module sells defense and offense upgrades and manages the defense
charges consumed during hack resolution.
"""

import logging

from sqlalchemy.orm import Session

from hackbank.cache import PlayerDirectoryCache
from hackbank.database import lock_players, run_in_transaction
from hackbank.domain.enums import DirectoryEvent, TransactionType
from hackbank.domain.errors import AlreadyOwnedError, InsufficientCreditsError
from hackbank.domain.rules_config import DEFAULT_RULES, EconomyRules
from hackbank.interfaces import ILedgerService
from hackbank.models import DefenseUpgrade, OffenseUpgrade, Player
from hackbank.services.ledger_service import BOUGHT_DEFENSE_UPGRADE, BOUGHT_OFFENSE_UPGRADE

logger = logging.getLogger(__name__)


class UpgradeService:
    """Service for buying and consuming upgrades."""

    def __init__(
        self,
        session: Session,
        ledger: ILedgerService,
        *,
        rules: EconomyRules = DEFAULT_RULES,
        cache: PlayerDirectoryCache | None = None,
    ):
        self.session = session
        self.ledger = ledger
        self.rules = rules
        self.cache = cache

    def get_defense_upgrade(self, player: Player) -> DefenseUpgrade | None:
        if player.defense_upgrade_id is None:
            return None
        return self.session.get(
            DefenseUpgrade, player.defense_upgrade_id, populate_existing=True
        )

    def get_offense_upgrade(self, player: Player) -> OffenseUpgrade | None:
        if player.offense_upgrade_id is None:
            return None
        return self.session.get(OffenseUpgrade, player.offense_upgrade_id)

    def buy_defense_upgrade(self, player: Player) -> DefenseUpgrade:
        """Buy one defense charge.

        The first purchase creates the upgrade with a single use; every later
        purchase adds one use to the existing upgrade.

        Args:
            player: The buyer

        Returns:
            The buyer's defense upgrade after the purchase

        Raises:
            InsufficientCreditsError: If the buyer cannot afford the price
        """
        player_id = player.id
        price = self.rules.defense_upgrade_price

        def operation() -> DefenseUpgrade:
            owner = lock_players(self.session, [player_id])[player_id]
            if owner.credits < price:
                raise InsufficientCreditsError(price, owner.credits)

            owner.credits -= price
            self.ledger.record(owner, price, BOUGHT_DEFENSE_UPGRADE, TransactionType.SEND)

            upgrade = self.get_defense_upgrade(owner)
            if upgrade is None:
                upgrade = DefenseUpgrade(owner_id=owner.id, uses=1)
                self.session.add(upgrade)
                self.session.flush()  # Get ID for the owner reference
                owner.defense_upgrade_id = upgrade.id
            else:
                upgrade.uses += 1
            self.session.flush()
            return upgrade

        upgrade = run_in_transaction(self.session, operation)
        self._notify(DirectoryEvent.BALANCE_CHANGED)
        logger.info("Player [%s] bought a defense upgrade, %s uses left", player_id, upgrade.uses)
        return upgrade

    def buy_offense_upgrade(self, player: Player) -> OffenseUpgrade:
        """Buy the permanent offense upgrade.

        Raises:
            AlreadyOwnedError: If the buyer already owns one
            InsufficientCreditsError: If the buyer cannot afford the price
        """
        player_id = player.id
        price = self.rules.offense_upgrade_price

        def operation() -> OffenseUpgrade:
            owner = lock_players(self.session, [player_id])[player_id]
            if owner.offense_upgrade_id is not None:
                raise AlreadyOwnedError("Already owned!")
            if owner.credits < price:
                raise InsufficientCreditsError(price, owner.credits)

            upgrade = OffenseUpgrade(owner_id=owner.id)
            self.session.add(upgrade)
            self.session.flush()  # Get ID for the owner reference

            owner.credits -= price
            owner.offense_upgrade_id = upgrade.id
            self.ledger.record(owner, price, BOUGHT_OFFENSE_UPGRADE, TransactionType.SEND)
            self.session.flush()
            return upgrade

        upgrade = run_in_transaction(self.session, operation)
        self._notify(DirectoryEvent.BALANCE_CHANGED)
        logger.info("Player [%s] bought the offense upgrade", player_id)
        return upgrade

    def consume_defense_charge(self, defender: Player) -> int:
        """Spend one defense charge inside the caller's unit of work.

        When the last charge is spent the owner reference is cleared and the
        upgrade deleted, in that order.

        Args:
            defender: Owner of the upgrade, already locked by the caller

        Returns:
            Remaining uses; 0 means the upgrade no longer exists
        """
        upgrade = self.get_defense_upgrade(defender)
        if upgrade is None:
            return 0

        remaining = upgrade.uses - 1
        if remaining > 0:
            upgrade.uses = remaining
            self.session.flush()
            return remaining

        defender.defense_upgrade_id = None
        self.session.flush()
        self.session.delete(upgrade)
        self.session.flush()
        logger.info("Defense upgrade of player [%s] used up", defender.id)
        return 0

    def apply_offense_multiplier(self, base_amount: float) -> float:
        """Scale a steal amount by the configured offense multiplier."""
        return base_amount * self.rules.offense_multiplier

    def _notify(self, *events: DirectoryEvent) -> None:
        if self.cache is not None:
            self.cache.invalidate_for(*events)
