"""
Strategies

Capacity-bounded capital sinks the vault routes underlying into.

A strategy reports its deposits as of the last sync (get_total_deposits),
its capacity bounds, and the signed change since that sync
(deposit_change). update_deposits resyncs the baseline and may report an
internal fee the vault should mint shares for.

SimulatedStrategy is the reference implementation used by tests and the
scenario simulator: it holds a plain underlying balance that rewards and
slashes move without touching the synced baseline.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from vault.errors import InsufficientDepositRoom, InsufficientLiquidity
from vault.fees import BASIS_POINTS
from vault.ledger import require_amount

LOG = logging.getLogger("vault.strategies")

StrategyFees = Tuple[List[str], List[int]]


class Strategy(ABC):
    """Interface the vault controller consumes."""

    name: str = "strategy"

    @abstractmethod
    def get_total_deposits(self) -> int:
        ...

    @abstractmethod
    def get_max_deposits(self) -> int:
        ...

    @abstractmethod
    def get_min_deposits(self) -> int:
        ...

    @abstractmethod
    def deposit(self, amount: int, aux_data: Any = None) -> int:
        """Place underlying; returns the amount accepted."""

    @abstractmethod
    def withdraw(self, amount: int, aux_data: Any = None) -> int:
        """Release underlying; returns the amount released."""

    @abstractmethod
    def deposit_change(self) -> int:
        """Signed gain/loss since the last update_deposits."""

    @abstractmethod
    def update_deposits(self, aux_data: Any = None) -> StrategyFees:
        """Resync the baseline; returns (fee recipients, fee amounts in underlying)."""

    def get_pending_fees(self) -> int:
        """Internal fee update_deposits would report right now."""
        return 0

    def headroom(self) -> int:
        return max(0, self.get_max_deposits() - self.get_total_deposits())

    def drawable(self) -> int:
        return max(0, self.get_total_deposits() - self.get_min_deposits())

    def snapshot(self) -> Dict[str, Any]:
        """Opaque copy of internal state for rollback."""
        return copy.deepcopy(vars(self))

    def restore(self, state: Dict[str, Any]) -> None:
        vars(self).clear()
        vars(self).update(copy.deepcopy(state))


class SimulatedStrategy(Strategy):
    """In-memory strategy with fixed capacity and an optional internal fee."""

    def __init__(
        self,
        name: str,
        max_deposits: int,
        min_deposits: int = 0,
        fee_bps: int = 0,
        fee_recipient: Optional[str] = None,
    ) -> None:
        self.name = name
        self.max_deposits = require_amount(max_deposits, "max_deposits", allow_zero=True)
        self.min_deposits = require_amount(min_deposits, "min_deposits", allow_zero=True)
        if fee_bps and not fee_recipient:
            raise ValueError(f"strategy {name} has fee_bps={fee_bps} but no fee_recipient")
        if fee_bps < 0 or fee_bps >= BASIS_POINTS:
            raise ValueError(f"strategy {name} fee_bps out of range: {fee_bps}")
        self.fee_bps = int(fee_bps)
        self.fee_recipient = fee_recipient
        # actual underlying held vs. the figure last reported to the vault
        self.balance = 0
        self.tracked_deposits = 0

    def __repr__(self) -> str:
        return (
            f"SimulatedStrategy(name={self.name!r}, deposits={self.tracked_deposits}, "
            f"balance={self.balance}, max={self.max_deposits}, min={self.min_deposits})"
        )

    def get_total_deposits(self) -> int:
        return self.tracked_deposits

    def get_max_deposits(self) -> int:
        return self.max_deposits

    def get_min_deposits(self) -> int:
        return min(self.min_deposits, self.tracked_deposits)

    def set_min_deposits(self, value: int) -> None:
        self.min_deposits = require_amount(value, "min_deposits", allow_zero=True)

    def deposit(self, amount: int, aux_data: Any = None) -> int:
        require_amount(amount)
        room = self.headroom()
        if room <= 0:
            raise InsufficientDepositRoom(f"strategy {self.name} is full")
        accepted = min(amount, room)
        self.balance += accepted
        self.tracked_deposits += accepted
        LOG.debug("[strategy] deposit name=%s accepted=%d total=%d", self.name, accepted, self.tracked_deposits)
        return accepted

    def withdraw(self, amount: int, aux_data: Any = None) -> int:
        require_amount(amount)
        available = min(self.drawable(), self.balance)
        if amount > available:
            raise InsufficientLiquidity(
                f"strategy {self.name} can release {available}, requested {amount}"
            )
        self.balance -= amount
        self.tracked_deposits -= amount
        LOG.debug("[strategy] withdraw name=%s amount=%d total=%d", self.name, amount, self.tracked_deposits)
        return amount

    def deposit_change(self) -> int:
        return self.balance - self.tracked_deposits

    def get_pending_fees(self) -> int:
        change = self.deposit_change()
        if change <= 0 or not self.fee_bps:
            return 0
        return change * self.fee_bps // BASIS_POINTS

    def update_deposits(self, aux_data: Any = None) -> StrategyFees:
        fee = self.get_pending_fees()
        self.tracked_deposits = self.balance
        if fee <= 0:
            return [], []
        return [str(self.fee_recipient)], [fee]

    # -- simulation hooks --------------------------------------------------

    def simulate_reward(self, amount: int) -> None:
        self.balance += require_amount(amount)

    def simulate_slash(self, amount: int) -> None:
        self.balance -= min(require_amount(amount), self.balance)

    def accrue(self, apr_bps: int, days: float) -> int:
        """Add simple-interest yield on the held balance; returns the reward."""
        if days <= 0 or apr_bps <= 0:
            return 0
        seconds = int(days * 86_400)
        reward = self.balance * int(apr_bps) * seconds // (BASIS_POINTS * 365 * 86_400)
        self.balance += reward
        return reward


__all__ = ["Strategy", "SimulatedStrategy", "StrategyFees"]
