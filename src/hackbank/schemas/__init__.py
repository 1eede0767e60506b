from .player import HackTarget, PlayerSummary

__all__ = [
    "HackTarget",
    "PlayerSummary",
]
