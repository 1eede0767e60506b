"""Upgrade models for the hackbank economy.

This module contains models for:
- DefenseUpgrades (consumable charges that absorb hacks)
- OffenseUpgrades (permanent multiplier on stolen credits)
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampCreatedMixin


class DefenseUpgrade(Base, TimestampCreatedMixin):
    """A stack of defense charges owned by exactly one player.

    Each absorbed hack consumes one use; the record is deleted when the last
    use is spent.

    Attributes:
        id: Primary key
        owner_id: Owning player (one upgrade per player)
        uses: Remaining charges
        version: Optimistic concurrency counter managed by SQLAlchemy
    """

    __tablename__ = "defense_upgrades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=False, unique=True
    )
    uses: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("uses >= 0", name="ck_defense_upgrades_uses"),)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<DefenseUpgrade(id={self.id}, owner_id={self.owner_id}, uses={self.uses})>"


class OffenseUpgrade(Base, TimestampCreatedMixin):
    """A permanent offense upgrade owned by exactly one player.

    The record carries no state of its own; the multiplier is part of the
    economy rules.
    """

    __tablename__ = "offense_upgrades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=False, unique=True
    )

    def __repr__(self) -> str:
        return f"<OffenseUpgrade(id={self.id}, owner_id={self.owner_id})>"
