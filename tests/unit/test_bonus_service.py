"""Unit tests for the periodic bonus."""

from datetime import UTC, datetime

import pytest
from sqlalchemy import select

from hackbank.domain.enums import CacheView
from hackbank.domain.rules_config import EconomyRules
from hackbank.models import BonusCycle, Transaction
from hackbank.services.bonus_service import BonusService, cycle_for
from hackbank.services.ledger_service import LedgerService


@pytest.fixture
def bonus(session, cache):
    return BonusService(session, LedgerService(session), rules=EconomyRules(), cache=cache)


class TestCycleFor:
    def test_same_window_same_cycle(self):
        start = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)
        later = datetime(2026, 1, 1, 12, 4, 59, tzinfo=UTC)

        assert cycle_for(start, 300) == cycle_for(later, 300)

    def test_next_window_next_cycle(self):
        start = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)
        later = datetime(2026, 1, 1, 12, 5, 0, tzinfo=UTC)

        assert cycle_for(later, 300) == cycle_for(start, 300) + 1

    @pytest.mark.parametrize("interval", [0, -1])
    def test_interval_must_be_positive(self, interval):
        with pytest.raises(ValueError):
            cycle_for(datetime(2026, 1, 1, tzinfo=UTC), interval)


class TestGrantBonus:
    def test_credits_every_active_player(self, session, bonus, make_player):
        alice = make_player("alice", 0.0)
        bob = make_player("bob", 10.0)
        banned = make_player("banned", 3.0, is_active=False)

        credited = bonus.grant_bonus(1)

        assert credited == 2
        assert alice.credits == 5.0
        assert bob.credits == 15.0
        assert banned.credits == 3.0

        entries = session.scalars(select(Transaction).order_by(Transaction.id)).all()
        assert [(e.player_id, e.description, e.transaction_type, e.credits) for e in entries] == [
            (alice.id, "Daily Bonus", "RECEIVE", 5.0),
            (bob.id, "Daily Bonus", "RECEIVE", 5.0),
        ]

    def test_same_cycle_is_paid_once(self, session, bonus, make_player):
        alice = make_player("alice", 0.0)

        assert bonus.grant_bonus(1) == 1
        assert bonus.grant_bonus(1) == 0

        assert alice.credits == 5.0
        assert bonus.is_granted(1)
        assert len(session.scalars(select(Transaction)).all()) == 1

    def test_next_cycle_pays_again(self, bonus, make_player):
        alice = make_player("alice", 0.0)

        bonus.grant_bonus(1)
        bonus.grant_bonus(2)

        assert alice.credits == 10.0

    def test_no_active_players(self, session, bonus, make_player):
        make_player("banned", is_active=False)

        assert bonus.grant_bonus(1) == 0

        cycle = session.scalars(select(BonusCycle)).one()
        assert cycle.players_credited == 0

    def test_invalidates_balance_views(self, bonus, make_player, cache):
        make_player("alice")
        cache.get_or_load(CacheView.ACTIVE, None, lambda: ("stale",))
        cache.get_or_load(CacheView.ACTIVE_EXCEPT, "bob", lambda: ("targets",))

        bonus.grant_bonus(1)

        assert not cache.is_cached(CacheView.ACTIVE, None)
        assert cache.is_cached(CacheView.ACTIVE_EXCEPT, "bob")

    def test_zero_amount_writes_no_entries(self, session, cache, make_player):
        service = BonusService(
            session, LedgerService(session), rules=EconomyRules(bonus_amount=0.0), cache=cache
        )
        alice = make_player("alice", 7.0)

        service.grant_bonus(1)

        assert alice.credits == 7.0
        assert session.scalars(select(Transaction)).all() == []
