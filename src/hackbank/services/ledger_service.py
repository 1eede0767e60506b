"""Ledger Service for hackbank.

This module records every credit movement in the append-only transactions
table and exposes the audit queries over it.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from hackbank.domain.enums import TransactionType
from hackbank.models import Player, Transaction

logger = logging.getLogger(__name__)

# Ledger descriptions
HACK = "Hack"
BOUGHT_DEFENSE_UPGRADE = "Bought Defense Upgrade"
BOUGHT_OFFENSE_UPGRADE = "Bought Offense Upgrade"
RANK_UP = "Rank Up"
DAILY_BONUS = "Daily Bonus"


class LedgerService:
    """Service for the append-only credit ledger."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        player: Player,
        credits: float,
        description: str,
        transaction_type: TransactionType,
    ) -> Transaction | None:
        """Append one ledger entry inside the caller's unit of work.

        The entry is flushed but not committed; it becomes durable together
        with the balance change it describes. Zero and negative amounts are
        dropped without error, so callers may pass a transfer that turned
        out to be empty.

        Args:
            player: Player whose balance moved
            credits: Amount moved
            description: Human-readable reason
            transaction_type: RECEIVE or SEND

        Returns:
            The new entry, or None if the amount was dropped
        """
        if credits <= 0:
            logger.debug(
                "dropping %s ledger entry of %s for player %s", description, credits, player.id
            )
            return None

        transaction = Transaction(
            player_id=player.id,
            transaction_type=TransactionType(transaction_type).value,
            credits=credits,
            description=description,
        )
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def get(self, transaction_id: int) -> Transaction | None:
        """Return a single entry, or None if it does not exist."""
        return self.session.get(Transaction, transaction_id)

    def list_all(self) -> list[Transaction]:
        """Return every entry, newest first."""
        stmt = select(Transaction).order_by(Transaction.created_at.desc(), Transaction.id.desc())
        return list(self.session.scalars(stmt))

    def list_for_player(self, player: Player) -> list[Transaction]:
        """Return the entries of one player, newest first."""
        stmt = (
            select(Transaction)
            .where(Transaction.player_id == player.id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        )
        return list(self.session.scalars(stmt))

    def balance_delta(self, player: Player) -> float:
        """Net credits received minus credits sent according to the ledger."""
        entries = self.list_for_player(player)
        received = sum(e.credits for e in entries if e.transaction_type == TransactionType.RECEIVE)
        sent = sum(e.credits for e in entries if e.transaction_type == TransactionType.SEND)
        return received - sent
