"""SQLAlchemy models for the hackbank economy.

This module exports all database models and the declarative base.
"""

# Base classes
from .base import Base, TimestampCreatedMixin, utc_now

# Combat records
from .hack import Hack

# Player models
from .player import Player

# Ledger models
from .transaction import BonusCycle, Transaction

# Upgrade models
from .upgrade import DefenseUpgrade, OffenseUpgrade

__all__ = [
    "Base",
    "BonusCycle",
    "DefenseUpgrade",
    "Hack",
    "OffenseUpgrade",
    "Player",
    "TimestampCreatedMixin",
    "Transaction",
    "utc_now",
]
