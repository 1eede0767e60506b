"""Service layer for the hackbank economy.

Services depend on Protocol interfaces where they call each other:

- HackService depends on IUpgradeService and ILedgerService
- UpgradeService, PlayerService and BonusService depend on ILedgerService

Use factory.py for production dependency wiring; inject protocol-based fakes
for testing.

Architecture:
    - LedgerService: append-only record of every credit movement
    - UpgradeService: defense/offense upgrade purchases and charge consumption
    - HackService: hack resolution, standing defenders, hack history
    - PlayerService: registration, moderation, rank-ups, cached listings
    - BonusService: periodic flat bonus for active players

Production Usage:
    from hackbank.factory import create_hack_service
    hacks = create_hack_service(session)
    hack = hacks.resolve_hack(attacker, defender, 25)

Testing Usage:
    from hackbank.services.hack_service import HackService

    class FakeUpgrades:
        def get_defense_upgrade(self, player):
            return None
        ...

    service = HackService(session, FakeUpgrades(), LedgerService(session))
"""

from hackbank.services.bonus_service import BonusService, cycle_for
from hackbank.services.hack_service import HackService
from hackbank.services.ledger_service import LedgerService
from hackbank.services.player_service import PlayerService
from hackbank.services.upgrade_service import UpgradeService

__all__ = [
    "BonusService",
    "HackService",
    "LedgerService",
    "PlayerService",
    "UpgradeService",
    "cycle_for",
]
