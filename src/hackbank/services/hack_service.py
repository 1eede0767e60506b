"""Hack Resolution Service for hackbank.

This module resolves hacks between players. A hack is decided in a fixed
order, first match wins:

1. The defender named the attacker as standing defender: Defended, free.
2. The defender owns a defense upgrade: one charge is spent, Defended.
3. Otherwise the hack succeeds and credits move from defender to attacker,
   scaled by the attacker's offense upgrade and capped at the defender's
   balance.

Every outcome is stored as a :class:`~hackbank.models.Hack` record.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from hackbank.cache import PlayerDirectoryCache
from hackbank.database import lock_players, run_in_transaction
from hackbank.domain.enums import DirectoryEvent, HackStatus, TransactionType
from hackbank.domain.errors import InvalidAmountError, SelfTargetError
from hackbank.domain.rules_config import DEFAULT_RULES, EconomyRules
from hackbank.interfaces import ILedgerService, IUpgradeService
from hackbank.models import Hack, Player
from hackbank.services.ledger_service import HACK

logger = logging.getLogger(__name__)


class HackService:
    """Service for resolving hacks and querying hack history."""

    def __init__(
        self,
        session: Session,
        upgrades: IUpgradeService,
        ledger: ILedgerService,
        *,
        rules: EconomyRules = DEFAULT_RULES,
        cache: PlayerDirectoryCache | None = None,
    ):
        self.session = session
        self.upgrades = upgrades
        self.ledger = ledger
        self.rules = rules
        self.cache = cache

    def validate_hack_amount(self, credits: float) -> float:
        """Check a requested amount against the configured request bounds.

        Raises:
            InvalidAmountError: If the amount is outside the bounds
        """
        low, high = self.rules.min_hack_amount, self.rules.max_hack_amount
        if not low <= credits <= high:
            raise InvalidAmountError(f"Amount must be between {low:g} and {high:g}.")
        return credits

    def resolve_hack(self, attacker: Player, defender: Player, credits: float) -> Hack:
        """Resolve one hack of ``attacker`` against ``defender``.

        Both players are locked for the duration of the transaction, so two
        concurrent hacks on the same defender see each other's transfers.

        Args:
            attacker: Player launching the hack
            defender: Targeted player
            credits: Requested amount, before the offense multiplier

        Returns:
            The stored hack record

        Raises:
            InvalidAmountError: If ``credits`` is not a positive number
            SelfTargetError: If attacker and defender are the same player and
                the rules forbid self-hacks
        """
        if not credits > 0:
            raise InvalidAmountError("Amount must be greater than zero.")

        attacker_id, defender_id = attacker.id, defender.id
        if attacker_id == defender_id and not self.rules.allow_self_hack:
            raise SelfTargetError("You cannot hack yourself.")

        def operation() -> Hack:
            players = lock_players(self.session, [attacker_id, defender_id])
            return self._resolve_locked(players[attacker_id], players[defender_id], credits)

        hack = run_in_transaction(self.session, operation)
        if hack.status == HackStatus.SUCCEEDED and hack.credits > 0:
            self._notify(DirectoryEvent.BALANCE_CHANGED)
        logger.info(
            "Hack [%s] by player [%s] on player [%s]: %s, %s credits",
            hack.id,
            attacker_id,
            defender_id,
            hack.status,
            hack.credits,
        )
        return hack

    def _resolve_locked(self, attacker: Player, defender: Player, credits: float) -> Hack:
        hack = Hack(attacker_id=attacker.id, defender_id=defender.id, credits=0.0)
        defense = self.upgrades.get_defense_upgrade(defender)

        if defender.standing_defender_id == attacker.id:
            hack.status = HackStatus.DEFENDED.value
        elif defense is not None and defense.uses >= 1:
            self.upgrades.consume_defense_charge(defender)
            hack.status = HackStatus.DEFENDED.value
        else:
            nominal = credits
            if self.upgrades.get_offense_upgrade(attacker) is not None:
                nominal = self.upgrades.apply_offense_multiplier(credits)
            transferred = min(nominal, defender.credits)

            defender.credits -= transferred
            attacker.credits += transferred
            self.ledger.record(attacker, transferred, HACK, TransactionType.RECEIVE)
            self.ledger.record(defender, transferred, HACK, TransactionType.SEND)

            hack.credits = transferred
            hack.status = HackStatus.SUCCEEDED.value

        self.session.add(hack)
        self.session.flush()
        return hack

    def set_standing_defender(self, player: Player, target: Player | None) -> bool:
        """Auto-defend every future hack by ``target`` against ``player``.

        A new target replaces the previous one; ``None`` clears it. Naming
        yourself is ignored.

        Returns:
            True if the reference was written, False if it was refused
        """
        if target is not None and target.id == player.id:
            logger.debug("Player [%s] tried to defend against themselves", player.id)
            return False

        player_id = player.id
        target_id = target.id if target is not None else None

        def operation() -> None:
            owner = lock_players(self.session, [player_id])[player_id]
            owner.standing_defender_id = target_id
            self.session.flush()

        run_in_transaction(self.session, operation)
        logger.info("Player [%s] now defends against player [%s]", player_id, target_id)
        return True

    def get_history(self, player: Player) -> list[Hack]:
        """Return the hacks the player took part in, newest first."""
        stmt = (
            select(Hack)
            .where(or_(Hack.attacker_id == player.id, Hack.defender_id == player.id))
            .order_by(Hack.created_at.desc(), Hack.id.desc())
        )
        return list(self.session.scalars(stmt))

    def _notify(self, *events: DirectoryEvent) -> None:
        if self.cache is not None:
            self.cache.invalidate_for(*events)
