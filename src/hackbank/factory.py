"""Service Factory for hackbank.

This module provides factory functions for creating service instances with
proper dependency wiring. Use these functions in production code so that all
services share the economy rules from the settings and one directory cache.

For testing, construct the services directly or inject protocol-based fakes.

Example:
    # Production usage
    from hackbank.factory import create_upgrade_service
    upgrades = create_upgrade_service(session)

    # Testing usage
    from hackbank.services.upgrade_service import UpgradeService
    upgrades = UpgradeService(session, FakeLedger())
"""

from functools import lru_cache

from sqlalchemy.orm import Session

from hackbank.cache import PlayerDirectoryCache
from hackbank.config import get_settings
from hackbank.domain.rules_config import EconomyRules
from hackbank.services.bonus_service import BonusService
from hackbank.services.hack_service import HackService
from hackbank.services.ledger_service import LedgerService
from hackbank.services.player_service import PlayerService
from hackbank.services.upgrade_service import UpgradeService


@lru_cache
def get_directory_cache() -> PlayerDirectoryCache:
    """Return the process-wide directory cache."""
    return PlayerDirectoryCache()


def _rules(rules: EconomyRules | None) -> EconomyRules:
    return rules if rules is not None else get_settings().economy_rules()


def _cache(cache: PlayerDirectoryCache | None) -> PlayerDirectoryCache:
    return cache if cache is not None else get_directory_cache()


def create_ledger_service(session: Session) -> LedgerService:
    """Create a LedgerService bound to ``session``."""
    return LedgerService(session)


def create_upgrade_service(
    session: Session,
    *,
    rules: EconomyRules | None = None,
    cache: PlayerDirectoryCache | None = None,
) -> UpgradeService:
    """Create an UpgradeService with its LedgerService dependency."""
    return UpgradeService(
        session, create_ledger_service(session), rules=_rules(rules), cache=_cache(cache)
    )


def create_hack_service(
    session: Session,
    *,
    rules: EconomyRules | None = None,
    cache: PlayerDirectoryCache | None = None,
) -> HackService:
    """Create a HackService with UpgradeService and LedgerService dependencies."""
    rules = _rules(rules)
    cache = _cache(cache)
    return HackService(
        session,
        create_upgrade_service(session, rules=rules, cache=cache),
        create_ledger_service(session),
        rules=rules,
        cache=cache,
    )


def create_player_service(
    session: Session,
    *,
    rules: EconomyRules | None = None,
    cache: PlayerDirectoryCache | None = None,
) -> PlayerService:
    """Create a PlayerService sharing the directory cache."""
    return PlayerService(
        session, create_ledger_service(session), rules=_rules(rules), cache=_cache(cache)
    )


def create_bonus_service(
    session: Session,
    *,
    rules: EconomyRules | None = None,
    cache: PlayerDirectoryCache | None = None,
) -> BonusService:
    """Create a BonusService with its LedgerService dependency."""
    return BonusService(
        session, create_ledger_service(session), rules=_rules(rules), cache=_cache(cache)
    )
