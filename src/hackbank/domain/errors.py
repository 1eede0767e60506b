"""Business rule violations raised by the services.

Every error carries a message suitable for showing to a player; the web
layer decides how to render it.
"""

from __future__ import annotations


class EconomyError(Exception):
    """Base class for recoverable rule violations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InsufficientCreditsError(EconomyError):
    """Raised when a spend exceeds the player's balance."""

    def __init__(self, required: float, available: float) -> None:
        super().__init__(f"You need {required:g} credits, but only have {available:g}.")
        self.required = required
        self.available = available


class AlreadyOwnedError(EconomyError):
    """Raised on a second purchase of a one-time upgrade."""


class NotFoundError(EconomyError):
    """Raised when a lookup by id finds nothing."""


class InvalidAmountError(EconomyError):
    """Raised when a requested hack amount is outside the allowed range."""


class UsernameTakenError(EconomyError):
    """Raised when a username is already used by another player."""

    def __init__(self, username: str) -> None:
        super().__init__(f'Username "{username}" unavailable.')
        self.username = username


class SelfTargetError(EconomyError):
    """Raised when a player targets themselves and the rules forbid it."""
