"""Ledger Service Protocol Interface.

This module defines the protocol (interface) for the append-only credit
ledger of the hackbank economy.
"""

from typing import Protocol

from hackbank.domain.enums import TransactionType
from hackbank.models import Player, Transaction


class ILedgerService(Protocol):
    """Protocol defining the interface for recording credit movements.

    Implementations write inside the caller's unit of work and never commit
    on their own.
    """

    def record(
        self,
        player: Player,
        credits: float,
        description: str,
        transaction_type: TransactionType,
    ) -> Transaction | None:
        """Append one ledger entry.

        Args:
            player: Player whose balance moved
            credits: Amount moved; zero or negative amounts are dropped
            description: Human-readable reason
            transaction_type: RECEIVE or SEND

        Returns:
            The new entry, or None if the amount was dropped
        """
        ...
