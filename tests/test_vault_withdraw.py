from typing import Any

import pytest

from vault.controller import VaultController
from vault.errors import InsufficientBalance, InsufficientLiquidity, WithdrawalsDisabled
from vault.strategies import SimulatedStrategy


class LeakyStrategy(SimulatedStrategy):
    """Releases one unit less than requested."""

    def withdraw(self, amount: int, aux_data: Any = None) -> int:
        return super().withdraw(amount - 1, aux_data)


def _deposits(strategies):
    return [s.get_total_deposits() for s in strategies]


def test_withdraw_drains_strategies_in_reverse_order(three_strategies) -> None:
    controller = VaultController(strategies=list(three_strategies))
    controller.deposit("acct1", 2000)
    controller.deposit("acct2", 1000)
    controller.deposit("acct3", 2000)
    assert _deposits(three_strategies) == [1000, 2000, 2000]

    controller.strategy_withdraw(0, 100)
    assert controller.buffered == 100
    assert _deposits(three_strategies) == [900, 2000, 2000]

    result = controller.withdraw("acct3", "acct3", 2000)
    assert result.from_buffer == 100
    assert [(p.index, p.amount) for p in result.pulls] == [(2, 1900)]
    assert _deposits(three_strategies) == [900, 2000, 100]

    controller.withdraw("acct1", "acct1", 2000)
    controller.withdraw("acct2", "acct2", 900)
    # every strategy stops at its floor before the next one is touched
    assert _deposits(three_strategies) == [70, 20, 10]
    assert controller.total_staked == 100
    assert controller.buffered == 0
    assert controller.balance_of("acct2") == 100


def test_withdraw_blocked_by_floors_changes_nothing(three_strategies) -> None:
    controller = VaultController(strategies=list(three_strategies))
    controller.deposit("whale", 5000)
    assert controller.can_withdraw() == 4960

    with pytest.raises(InsufficientLiquidity):
        controller.withdraw("whale", "whale", 5000)

    assert controller.total_staked == 5000
    assert controller.balance_of("whale") == 5000
    assert _deposits(three_strategies) == [1000, 2000, 2000]


def test_withdraw_more_than_owned(vault) -> None:
    vault.deposit("alice", 100)
    vault.deposit("bob", 100)
    with pytest.raises(InsufficientBalance):
        vault.withdraw("alice", "alice", 101)
    with pytest.raises(InsufficientBalance):
        vault.withdraw("carol", "carol", 1)
    assert vault.total_staked == 200


def test_withdraw_pays_recipient_and_records_event(vault) -> None:
    vault.deposit("alice", 500)
    result = vault.withdraw("alice", "exchange", 200)
    assert result.recipient == "exchange"
    assert result.shares == 200
    assert vault.balance_of("alice") == 300
    assert vault.balance_of("exchange") == 0

    events = vault.events.of_type("vault_withdraw")
    assert len(events) == 1
    assert events[0]["recipient"] == "exchange"
    assert events[0]["pulls"] == [{"index": 0, "strategy": "a", "amount": 200}]


def test_withdrawals_disabled(vault) -> None:
    vault.deposit("alice", 100)
    vault.set_withdrawals_enabled(False)
    with pytest.raises(WithdrawalsDisabled):
        vault.withdraw("alice", "alice", 10)
    assert vault.balance_of("alice") == 100


def test_short_release_rolls_back_earlier_pulls() -> None:
    a = LeakyStrategy("a", max_deposits=600)
    b = SimulatedStrategy("b", max_deposits=500)
    controller = VaultController(strategies=[a, b])
    controller.deposit("alice", 1000)

    with pytest.raises(InsufficientLiquidity):
        controller.withdraw("alice", "alice", 700)

    assert a.get_total_deposits() == 600
    assert b.get_total_deposits() == 400
    assert controller.total_staked == 1000
    assert controller.balance_of("alice") == 1000


def test_withdraw_burns_rounded_up_shares() -> None:
    strategy = SimulatedStrategy("a", max_deposits=10_000)
    controller = VaultController(strategies=[strategy])
    controller.deposit("alice", 3)
    strategy.simulate_reward(7)
    controller.reconcile([0])
    assert (controller.total_shares, controller.total_staked) == (3, 10)

    price_before = controller.share_price
    result = controller.withdraw("alice", "alice", 5)
    # 5 * 3 / 10 = 1.5 shares, burned as 2
    assert result.shares == 2
    assert controller.balance_of("alice") == 1
    assert controller.share_price >= price_before


def test_unreconciled_slash_surfaces_as_liquidity_error(vault, two_strategies) -> None:
    a, b = two_strategies
    vault.deposit("alice", 1000)
    b.simulate_slash(300)
    # b still reports 400 until reconciled but can only release 100
    with pytest.raises(InsufficientLiquidity):
        vault.withdraw("alice", "alice", 200)
    assert vault.total_staked == 1000
    assert b.get_total_deposits() == 400
