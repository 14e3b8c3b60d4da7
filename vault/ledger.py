"""
Share Ledger

Single owned aggregate (VaultState) plus the pure functions that mutate it.

All share <-> underlying conversion lives here so the rounding policy is
defined once:
- shares_for_underlying / underlying_for_shares round down (pool keeps dust)
- shares_to_burn rounds up (the withdrawing account pays the dust)

Balances and totals are plain ints in the smallest underlying unit.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict

from vault.errors import InsufficientBalance, InvalidAmount


__all__ = [
    "VaultState",
    "require_amount",
    "shares_for_underlying",
    "underlying_for_shares",
    "shares_to_burn",
    "share_price",
    "balance_of",
    "underlying_balance_of",
    "mint",
    "burn",
    "move",
    "snapshot",
    "copy_state",
]


@dataclass
class VaultState:
    """Aggregate ledger state owned by one VaultController."""
    total_shares: int = 0
    total_staked: int = 0
    buffered: int = 0
    balances: Dict[str, int] = field(default_factory=dict)


def require_amount(value: Any, name: str = "amount", allow_zero: bool = False) -> int:
    """Return value as a validated non-negative int or raise InvalidAmount."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidAmount(f"{name} must be positive, got {value}")
    return value


def shares_for_underlying(state: VaultState, amount: int) -> int:
    """
    Shares worth `amount` underlying at the current rate, rounded down.

    An empty vault mints 1:1. Shares outstanding against zero stake are
    worth nothing, so no amount buys one.
    """
    if state.total_shares == 0:
        return amount
    if state.total_staked == 0:
        return 0
    return amount * state.total_shares // state.total_staked


def underlying_for_shares(state: VaultState, shares: int) -> int:
    """Underlying claimed by `shares` at the current rate, rounded down."""
    if state.total_shares == 0:
        return 0
    return shares * state.total_staked // state.total_shares


def shares_to_burn(state: VaultState, amount: int) -> int:
    """Shares that must be burned to release `amount` underlying, rounded up."""
    if state.total_shares == 0 or state.total_staked == 0:
        return amount
    return -(-amount * state.total_shares // state.total_staked)


def share_price(state: VaultState) -> float:
    if state.total_shares == 0:
        return 1.0
    return state.total_staked / state.total_shares


def balance_of(state: VaultState, account: str) -> int:
    return state.balances.get(account, 0)


def underlying_balance_of(state: VaultState, account: str) -> int:
    return underlying_for_shares(state, balance_of(state, account))


def mint(state: VaultState, account: str, shares: int) -> None:
    if shares <= 0:
        return
    state.balances[account] = state.balances.get(account, 0) + shares
    state.total_shares += shares


def burn(state: VaultState, account: str, shares: int) -> None:
    held = state.balances.get(account, 0)
    if shares > held:
        raise InsufficientBalance(f"account={account} holds {held} shares, needs {shares}")
    if shares <= 0:
        return
    remaining = held - shares
    if remaining:
        state.balances[account] = remaining
    else:
        del state.balances[account]
    state.total_shares -= shares


def move(state: VaultState, sender: str, recipient: str, shares: int) -> None:
    held = state.balances.get(sender, 0)
    if shares > held:
        raise InsufficientBalance(f"account={sender} holds {held} shares, needs {shares}")
    if shares <= 0 or sender == recipient:
        return
    remaining = held - shares
    if remaining:
        state.balances[sender] = remaining
    else:
        del state.balances[sender]
    state.balances[recipient] = state.balances.get(recipient, 0) + shares


def snapshot(state: VaultState) -> Dict[str, Any]:
    """Flat view used by events and the simulator history."""
    return {
        "total_shares": state.total_shares,
        "total_staked": state.total_staked,
        "buffered": state.buffered,
        "share_price": share_price(state),
        "accounts": len(state.balances),
    }


def copy_state(state: VaultState) -> VaultState:
    return copy.deepcopy(state)
