"""Economy and combat resolution engine for a multiplayer hacking game."""

__version__ = "0.1.0"
