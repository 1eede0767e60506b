"""Enumerations used across the hackbank domain."""

from __future__ import annotations

from enum import StrEnum


class PlayerRole(StrEnum):
    """Access level of a player."""

    USER = "USER"
    ADMIN = "ADMIN"


class HackStatus(StrEnum):
    """Outcome of a resolved hack. Every hack is exactly one of these."""

    DEFENDED = "Defended"
    SUCCEEDED = "Succeeded"


class TransactionType(StrEnum):
    """Direction of a ledger entry from the owning player's point of view."""

    RECEIVE = "RECEIVE"
    SEND = "SEND"


class CacheView(StrEnum):
    """Named directory listings held by the player cache."""

    ACTIVE = "active"
    ACTIVE_RANKED = "active_ranked"
    ACTIVE_EXCEPT = "active_except"
    ALL_EXCEPT = "all_except"


class DirectoryEvent(StrEnum):
    """Committed writes that may make a cached listing stale."""

    REGISTERED = "registered"
    STATUS_CHANGED = "status_changed"
    ROLE_CHANGED = "role_changed"
    PROFILE_EDITED = "profile_edited"
    RANK_CHANGED = "rank_changed"
    BALANCE_CHANGED = "balance_changed"
