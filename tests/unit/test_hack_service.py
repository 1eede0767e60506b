"""Unit tests for HackService."""

import pytest
from sqlalchemy import select

from hackbank.domain.enums import CacheView, HackStatus, TransactionType
from hackbank.domain.errors import InvalidAmountError, SelfTargetError
from hackbank.domain.rules_config import EconomyRules
from hackbank.models import DefenseUpgrade, Hack, Transaction
from hackbank.services.hack_service import HackService
from hackbank.services.ledger_service import LedgerService
from hackbank.services.upgrade_service import UpgradeService

RULES = EconomyRules()


class FailingLedger(LedgerService):
    """Ledger that fails on the n-th record call."""

    def __init__(self, session, fail_on: int):
        super().__init__(session)
        self.calls = 0
        self.fail_on = fail_on

    def record(self, player, amount, description, transaction_type):
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("ledger unavailable")
        return super().record(player, amount, description, transaction_type)


@pytest.fixture
def ledger(session):
    return LedgerService(session)


@pytest.fixture
def upgrades(session, ledger, cache):
    return UpgradeService(session, ledger, rules=RULES, cache=cache)


@pytest.fixture
def hacks(session, upgrades, ledger, cache):
    return HackService(session, upgrades, ledger, rules=RULES, cache=cache)


def _entries(session) -> list[Transaction]:
    return list(session.scalars(select(Transaction).order_by(Transaction.id)))


class TestResolveHack:
    """Resolution order and credit movement."""

    def test_undefended_hack_moves_requested_amount(self, session, hacks, make_player):
        attacker = make_player("attacker", 0.0)
        defender = make_player("defender", 500.0)

        hack = hacks.resolve_hack(attacker, defender, 100.0)

        assert hack.status == HackStatus.SUCCEEDED
        assert hack.credits == 100.0
        assert attacker.credits == 100.0
        assert defender.credits == 400.0

        entries = _entries(session)
        assert [(e.player_id, e.transaction_type, e.credits, e.description) for e in entries] == [
            (attacker.id, TransactionType.RECEIVE, 100.0, "Hack"),
            (defender.id, TransactionType.SEND, 100.0, "Hack"),
        ]

    def test_offense_upgrade_multiplies_and_caps_at_balance(
        self, session, hacks, upgrades, make_player
    ):
        attacker = make_player("attacker", 250.0)
        upgrades.buy_offense_upgrade(attacker)
        defender = make_player("defender", 120.0)

        hack = hacks.resolve_hack(attacker, defender, 100.0)

        assert hack.status == HackStatus.SUCCEEDED
        assert hack.credits == 120.0
        assert attacker.credits == 120.0
        assert defender.credits == 0.0

    def test_offense_upgrade_multiplier_below_balance(self, hacks, upgrades, make_player):
        attacker = make_player("attacker", 250.0)
        upgrades.buy_offense_upgrade(attacker)
        defender = make_player("defender", 1000.0)

        hack = hacks.resolve_hack(attacker, defender, 40.0)

        assert hack.credits == pytest.approx(60.0)
        assert defender.credits == pytest.approx(940.0)

    def test_defense_upgrade_blocks_and_is_consumed(self, session, hacks, upgrades, make_player):
        attacker = make_player("attacker", 0.0)
        defender = make_player("defender", 200.0)
        upgrade_id = upgrades.buy_defense_upgrade(defender).id
        before = len(_entries(session))

        hack = hacks.resolve_hack(attacker, defender, 30.0)

        assert hack.status == HackStatus.DEFENDED
        assert hack.credits == 0.0
        assert attacker.credits == 0.0
        assert defender.credits == 0.0
        assert defender.defense_upgrade_id is None
        assert session.get(DefenseUpgrade, upgrade_id) is None
        assert len(_entries(session)) == before

    def test_defense_upgrade_with_several_uses_loses_one(self, hacks, upgrades, make_player):
        attacker = make_player("attacker")
        defender = make_player("defender", 400.0)
        upgrades.buy_defense_upgrade(defender)
        upgrades.buy_defense_upgrade(defender)

        hacks.resolve_hack(attacker, defender, 10.0)

        upgrade = upgrades.get_defense_upgrade(defender)
        assert upgrade is not None
        assert upgrade.uses == 1

    def test_standing_defender_takes_precedence(self, session, hacks, upgrades, make_player):
        attacker = make_player("attacker")
        defender = make_player("defender", 600.0)
        upgrades.buy_defense_upgrade(defender)
        hacks.set_standing_defender(defender, attacker)

        hack = hacks.resolve_hack(attacker, defender, 50.0)

        assert hack.status == HackStatus.DEFENDED
        assert hack.credits == 0.0
        assert defender.credits == 400.0
        # Charge untouched
        assert upgrades.get_defense_upgrade(defender).uses == 1

    def test_standing_defender_only_blocks_named_attacker(self, hacks, make_player):
        attacker = make_player("attacker")
        other = make_player("other")
        defender = make_player("defender", 100.0)
        hacks.set_standing_defender(defender, other)

        hack = hacks.resolve_hack(attacker, defender, 25.0)

        assert hack.status == HackStatus.SUCCEEDED
        assert attacker.credits == 25.0

    def test_standing_defender_survives_deactivation(self, session, hacks, make_player):
        attacker = make_player("attacker")
        defender = make_player("defender", 100.0)
        hacks.set_standing_defender(defender, attacker)
        attacker.is_active = False
        session.commit()

        hack = hacks.resolve_hack(attacker, defender, 25.0)

        assert hack.status == HackStatus.DEFENDED

    def test_broke_defender_yields_zero_success_without_ledger(self, session, hacks, make_player):
        attacker = make_player("attacker", 10.0)
        defender = make_player("defender", 0.0)

        hack = hacks.resolve_hack(attacker, defender, 20.0)

        assert hack.status == HackStatus.SUCCEEDED
        assert hack.credits == 0.0
        assert attacker.credits == 10.0
        assert _entries(session) == []

    def test_every_outcome_is_stored(self, session, hacks, upgrades, make_player):
        attacker = make_player("attacker")
        defender = make_player("defender", 300.0)
        upgrades.buy_defense_upgrade(defender)

        hacks.resolve_hack(attacker, defender, 10.0)
        hacks.resolve_hack(attacker, defender, 10.0)

        statuses = session.scalars(select(Hack.status).order_by(Hack.id)).all()
        assert statuses == ["Defended", "Succeeded"]

    @pytest.mark.parametrize("amount", [0.0, -5.0, float("nan")])
    def test_amount_that_is_not_positive_rejected(self, session, hacks, make_player, amount):
        attacker = make_player("attacker")
        defender = make_player("defender", 100.0)

        with pytest.raises(InvalidAmountError):
            hacks.resolve_hack(attacker, defender, amount)

        assert session.scalars(select(Hack)).all() == []

    def test_self_hack_allowed_by_default(self, hacks, make_player):
        player = make_player("solo", 100.0)

        hack = hacks.resolve_hack(player, player, 30.0)

        assert hack.status == HackStatus.SUCCEEDED
        assert hack.credits == 30.0
        assert player.credits == 100.0

    def test_self_hack_forbidden_by_rules(self, session, upgrades, ledger, make_player):
        service = HackService(
            session, upgrades, ledger, rules=EconomyRules(allow_self_hack=False)
        )
        player = make_player("solo", 100.0)

        with pytest.raises(SelfTargetError):
            service.resolve_hack(player, player, 30.0)

    def test_ledger_failure_rolls_back_everything(self, session, upgrades, make_player):
        ledger = FailingLedger(session, fail_on=2)
        service = HackService(session, upgrades, ledger, rules=RULES)
        attacker = make_player("attacker", 0.0)
        defender = make_player("defender", 500.0)

        with pytest.raises(RuntimeError):
            service.resolve_hack(attacker, defender, 100.0)

        assert attacker.credits == 0.0
        assert defender.credits == 500.0
        assert _entries(session) == []
        assert session.scalars(select(Hack)).all() == []

    def test_success_invalidates_balance_views(self, hacks, make_player, cache):
        attacker = make_player("attacker")
        defender = make_player("defender", 100.0)
        cache.get_or_load(CacheView.ACTIVE_RANKED, None, lambda: ("stale",))

        hacks.resolve_hack(attacker, defender, 10.0)

        assert not cache.is_cached(CacheView.ACTIVE_RANKED, None)

    def test_defended_hack_keeps_cache(self, hacks, make_player, cache):
        attacker = make_player("attacker")
        defender = make_player("defender", 100.0)
        hacks.set_standing_defender(defender, attacker)
        cache.get_or_load(CacheView.ACTIVE_RANKED, None, lambda: ("cached",))

        hacks.resolve_hack(attacker, defender, 10.0)

        assert cache.is_cached(CacheView.ACTIVE_RANKED, None)


class TestValidateHackAmount:
    @pytest.mark.parametrize("amount", [1.0, 25.0, 50.0])
    def test_within_bounds(self, hacks, amount):
        assert hacks.validate_hack_amount(amount) == amount

    @pytest.mark.parametrize("amount", [0.0, 0.5, 50.5, 100.0])
    def test_outside_bounds(self, hacks, amount):
        with pytest.raises(InvalidAmountError) as excinfo:
            hacks.validate_hack_amount(amount)
        assert "between 1 and 50" in excinfo.value.message


class TestStandingDefender:
    def test_set_and_overwrite(self, hacks, make_player):
        player = make_player("player")
        first = make_player("first")
        second = make_player("second")

        assert hacks.set_standing_defender(player, first) is True
        assert player.standing_defender_id == first.id

        assert hacks.set_standing_defender(player, second) is True
        assert player.standing_defender_id == second.id

    def test_clear(self, hacks, make_player):
        player = make_player("player")
        target = make_player("target")
        hacks.set_standing_defender(player, target)

        assert hacks.set_standing_defender(player, None) is True
        assert player.standing_defender_id is None

    def test_self_reference_is_refused(self, hacks, make_player):
        player = make_player("player")
        target = make_player("target")
        hacks.set_standing_defender(player, target)

        assert hacks.set_standing_defender(player, player) is False
        assert player.standing_defender_id == target.id


def test_history_is_newest_first_and_covers_both_roles(hacks, make_player):
    alice = make_player("alice", 100.0)
    bob = make_player("bob", 100.0)
    carol = make_player("carol", 100.0)

    first = hacks.resolve_hack(alice, bob, 5.0)
    second = hacks.resolve_hack(carol, alice, 5.0)
    hacks.resolve_hack(bob, carol, 5.0)
    fourth = hacks.resolve_hack(alice, carol, 5.0)

    history = hacks.get_history(alice)

    assert [h.id for h in history] == [fourth.id, second.id, first.id]
