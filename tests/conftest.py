"""Pytest configuration and shared fixtures.

This adds the `src/` directory to `sys.path` so tests can import the
`hackbank` package without requiring an editable install in CI, and
provides an in-memory SQLite database per test.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from hackbank.cache import PlayerDirectoryCache  # noqa: E402
from hackbank.models import Base, Player  # noqa: E402


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing and dispose it after use."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine)  # noqa: N806
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def cache():
    return PlayerDirectoryCache()


@pytest.fixture
def make_player(session) -> Callable[..., Player]:
    """Return a helper that persists a player and commits."""

    def _make(username: str, credits: float = 0.0, **fields) -> Player:
        player = Player(
            username=username,
            email=f"{username}@example.com",
            password_hash="hashed",
            credits=credits,
            rank=fields.pop("rank", 0),
            role=fields.pop("role", "USER"),
            is_active=fields.pop("is_active", True),
            **fields,
        )
        session.add(player)
        session.commit()
        return player

    return _make
