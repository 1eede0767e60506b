"""Protocol-based interfaces for hackbank services.

This module exports the service protocols the combat resolver depends on,
so tests can inject fakes instead of wiring the real services.
"""

from hackbank.interfaces.ledger import ILedgerService
from hackbank.interfaces.upgrade import IUpgradeService

__all__ = [
    "ILedgerService",
    "IUpgradeService",
]
