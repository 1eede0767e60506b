"""Player model for the hackbank economy.

This module contains the model for players, including their balance, rank,
role and the id references to their standing defender and owned upgrades.
"""

from sqlalchemy import Boolean, CheckConstraint, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hackbank.domain.enums import PlayerRole

from .base import Base, TimestampCreatedMixin


class Player(Base, TimestampCreatedMixin):
    """Represents a player of the game.

    Ownership of upgrades is stored as plain id references on both sides
    (``Player.defense_upgrade_id`` and ``DefenseUpgrade.owner_id``); the
    upgrade service keeps the two consistent inside one transaction.

    Attributes:
        id: Primary key
        username: Unique display handle
        email: Contact address
        password_hash: Hashed password, produced by the authentication layer
        profile_picture: Optional avatar URL
        credits: Balance, never negative
        rank: Non-negative rank bought with credits
        role: USER or ADMIN
        is_active: False once the player is banned or deactivated
        standing_defender_id: Player whose hacks against this player are auto-defended
        defense_upgrade_id: Owned DefenseUpgrade, if any
        offense_upgrade_id: Owned OffenseUpgrade, if any
        version: Optimistic concurrency counter managed by SQLAlchemy
    """

    __tablename__ = "players"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Identity
    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    profile_picture: Mapped[str | None] = mapped_column(String, nullable=True)

    # Economy
    credits: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Access
    role: Mapped[str] = mapped_column(String, nullable=False, default=PlayerRole.USER.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # References
    standing_defender_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=True
    )
    defense_upgrade_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("defense_upgrades.id", use_alter=True, name="fk_players_defense_upgrade"),
        nullable=True,
    )
    offense_upgrade_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("offense_upgrades.id", use_alter=True, name="fk_players_offense_upgrade"),
        nullable=True,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_players_credits"),
        CheckConstraint("rank >= 0", name="ck_players_rank"),
        CheckConstraint("role IN ('USER', 'ADMIN')", name="ck_players_role"),
        Index("idx_players_active_rank", "is_active", "rank"),
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_admin(self) -> bool:
        return self.role == PlayerRole.ADMIN

    def __repr__(self) -> str:
        return (
            f"<Player(id={self.id}, username='{self.username}', credits={self.credits}, "
            f"rank={self.rank}, active={self.is_active})>"
        )
