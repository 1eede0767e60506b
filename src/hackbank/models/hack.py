"""Hack model for the hackbank economy.

A hack is the write-once record of one resolved attack.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hackbank.domain.enums import HackStatus

from .base import Base, TimestampCreatedMixin

if TYPE_CHECKING:
    from .player import Player


class Hack(Base, TimestampCreatedMixin):
    """Represents one resolved attack.

    Attributes:
        id: Primary key
        attacker_id: Player who launched the hack
        defender_id: Player who was targeted
        status: Defended or Succeeded
        credits: Credits actually transferred (0 when defended)
    """

    __tablename__ = "hacks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    attacker_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)
    defender_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)
    credits: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Read-only conveniences for history screens
    attacker: Mapped["Player"] = relationship("Player", foreign_keys=[attacker_id], viewonly=True)
    defender: Mapped["Player"] = relationship("Player", foreign_keys=[defender_id], viewonly=True)

    __table_args__ = (
        CheckConstraint("status IN ('Defended', 'Succeeded')", name="ck_hacks_status"),
        CheckConstraint("credits >= 0", name="ck_hacks_credits"),
        Index("idx_hacks_attacker", "attacker_id"),
        Index("idx_hacks_defender", "defender_id"),
        Index("idx_hacks_created", "created_at"),
    )

    @property
    def defended(self) -> bool:
        return self.status == HackStatus.DEFENDED

    def __repr__(self) -> str:
        return (
            f"<Hack(id={self.id}, attacker_id={self.attacker_id}, "
            f"defender_id={self.defender_id}, status='{self.status}', credits={self.credits})>"
        )
