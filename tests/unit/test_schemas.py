import pytest
from pydantic import ValidationError

from hackbank.schemas import HackTarget, PlayerSummary


def test_player_summary_from_model(make_player):
    player = make_player("alice", 42.0, rank=3, profile_picture="alice.png")

    summary = PlayerSummary.model_validate(player)

    assert summary.id == player.id
    assert summary.username == "alice"
    assert summary.credits == 42.0
    assert summary.rank == 3
    assert summary.role == "USER"
    assert summary.profile_picture == "alice.png"
    assert summary.is_active is True


def test_hack_target_omits_balance(make_player):
    target = HackTarget.model_validate(make_player("bob", 99.0))

    data = target.model_dump()
    assert "credits" not in data
    assert "role" not in data
    assert data["username"] == "bob"


def test_snapshots_are_frozen(make_player):
    summary = PlayerSummary.model_validate(make_player("alice"))

    with pytest.raises(ValidationError):
        summary.credits = 1000.0


def test_negative_balance_rejected():
    with pytest.raises(ValidationError):
        PlayerSummary(
            id=1, username="alice", credits=-1.0, rank=0, role="USER", is_active=True
        )
