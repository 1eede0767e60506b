"""Periodic Bonus Service for hackbank.

This module pays the flat per-cycle bonus to every active player. It uses
the same row locking and ledger primitives as hack resolution, so a bonus
never overwrites a transfer that commits at the same time.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hackbank.cache import PlayerDirectoryCache
from hackbank.database import lock_players, run_in_transaction
from hackbank.domain.enums import DirectoryEvent, TransactionType
from hackbank.domain.rules_config import DEFAULT_RULES, EconomyRules
from hackbank.interfaces import ILedgerService
from hackbank.models import BonusCycle, Player
from hackbank.services.ledger_service import DAILY_BONUS

logger = logging.getLogger(__name__)


def cycle_for(moment: datetime, interval_seconds: float) -> int:
    """Return the key of the bonus cycle containing ``moment``.

    Cycles are consecutive windows of ``interval_seconds`` counted from the
    Unix epoch.
    """
    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be positive")
    return int(moment.timestamp() // interval_seconds)


class BonusService:
    """Service granting the periodic credit bonus."""

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

    def is_granted(self, cycle: int) -> bool:
        stmt = select(BonusCycle.id).where(BonusCycle.cycle == cycle)
        return self.session.scalar(stmt) is not None

    def grant_bonus(self, cycle: int) -> int:
        """Credit the bonus to every active player, once per cycle.

        Args:
            cycle: Key of the cycle being paid

        Returns:
            Number of players credited; 0 if the cycle was already paid
        """
        amount = self.rules.bonus_amount

        def operation() -> int:
            if self.is_granted(cycle):
                return 0
            ids = self.session.scalars(select(Player.id).where(Player.is_active.is_(True))).all()
            players = lock_players(self.session, ids) if ids else {}
            for player in players.values():
                if not player.is_active:
                    continue
                player.credits += amount
                self.ledger.record(player, amount, DAILY_BONUS, TransactionType.RECEIVE)
            credited = sum(1 for p in players.values() if p.is_active)
            self.session.add(BonusCycle(cycle=cycle, players_credited=credited))
            self.session.flush()
            return credited

        try:
            credited = run_in_transaction(self.session, operation)
        except IntegrityError:
            # Another worker recorded the same cycle first.
            logger.info("Bonus cycle %s granted concurrently", cycle)
            return 0

        if credited == 0:
            logger.info("Bonus cycle %s already granted or no active players", cycle)
            return 0

        if amount > 0 and self.cache is not None:
            self.cache.invalidate_for(DirectoryEvent.BALANCE_CHANGED)
        logger.info("Added bonus of %s credits to %s players (cycle %s)", amount, credited, cycle)
        return credited
