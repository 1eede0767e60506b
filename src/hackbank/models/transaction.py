"""Ledger model for the hackbank economy.

This module contains the model for transactions, the append-only audit
trail of every credit movement.
"""

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampCreatedMixin


class Transaction(Base, TimestampCreatedMixin):
    """One directional credit movement for one player.

    Transactions are never updated or deleted once written.

    Attributes:
        id: Primary key
        player_id: Player whose balance moved
        transaction_type: RECEIVE or SEND
        credits: Amount moved, strictly positive
        description: Human-readable reason ("Hack", "Rank Up", ...)
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)
    transaction_type: Mapped[str] = mapped_column(String, nullable=False)
    credits: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        CheckConstraint("credits > 0", name="ck_transactions_credits"),
        CheckConstraint(
            "transaction_type IN ('RECEIVE', 'SEND')", name="ck_transactions_type"
        ),
        Index("idx_transactions_player", "player_id"),
        Index("idx_transactions_created", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, player_id={self.player_id}, "
            f"type='{self.transaction_type}', credits={self.credits})>"
        )


class BonusCycle(Base, TimestampCreatedMixin):
    """Marks a periodic bonus cycle as granted so it is never paid twice."""

    __tablename__ = "bonus_cycles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cycle: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    players_credited: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<BonusCycle(cycle={self.cycle}, players_credited={self.players_credited})>"
