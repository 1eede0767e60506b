"""Lightweight configuration for the hackbank engine."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hackbank.domain.rules_config import EconomyRules


class Settings(BaseSettings):
    """Application settings read from the environment and ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str = Field(default="sqlite:///hackbank.db", description="SQLAlchemy URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo emitted SQL")
    DATABASE_POOL_SIZE: int = Field(default=5, ge=1)
    DATABASE_MAX_OVERFLOW: int = Field(default=10, ge=0)
    DATABASE_POOL_RECYCLE: int = Field(default=1800, description="Seconds before recycling")
    DATABASE_POOL_TIMEOUT: int = Field(default=30, description="Seconds to wait for a connection")

    LOG_LEVEL: str = Field(default="INFO", description="Root logger level")

    DEFENSE_UPGRADE_PRICE: float = Field(default=200.0, gt=0.0)
    OFFENSE_UPGRADE_PRICE: float = Field(default=250.0, gt=0.0)
    OFFENSE_UPGRADE_MULTIPLIER: float = Field(default=1.5, gt=0.0)
    RANK_UP_COST: float = Field(default=50.0, gt=0.0)
    BONUS_AMOUNT: float = Field(default=5.0, ge=0.0)
    STARTING_CREDITS: float = Field(default=0.0, ge=0.0)
    MIN_HACK_AMOUNT: float = Field(default=1.0, gt=0.0)
    MAX_HACK_AMOUNT: float = Field(default=50.0, gt=0.0)
    ALLOW_SELF_HACK: bool = Field(
        default=True,
        description="Whether the resolver accepts a hack where attacker and defender are the same player",
    )

    BONUS_INTERVAL_SECONDS: float = Field(
        default=300.0,
        description="Real-time seconds between periodic bonus cycles",
        gt=0.0,
    )

    def economy_rules(self) -> EconomyRules:
        """Build the immutable rule set consumed by the services."""

        return EconomyRules(
            defense_upgrade_price=self.DEFENSE_UPGRADE_PRICE,
            offense_upgrade_price=self.OFFENSE_UPGRADE_PRICE,
            offense_multiplier=self.OFFENSE_UPGRADE_MULTIPLIER,
            rank_up_cost=self.RANK_UP_COST,
            bonus_amount=self.BONUS_AMOUNT,
            starting_credits=self.STARTING_CREDITS,
            min_hack_amount=self.MIN_HACK_AMOUNT,
            max_hack_amount=self.MAX_HACK_AMOUNT,
            allow_self_hack=self.ALLOW_SELF_HACK,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
