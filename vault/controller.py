"""
Vault Controller

Orchestrates the share ledger and the ordered strategy list:
- deposit: mint at the pre-deposit rate, top up the liquidity buffer, then
  place the rest into strategies in priority order
- withdraw: burn (rounded up), pay from the buffer first, then pull from
  strategies in reverse priority order; all-or-nothing
- reconcile: collect each named strategy's deposit change, mint fees at the
  pre-rebase rate on a net gain, then move total_staked by the net change

Every public call runs under one re-entrant lock against a snapshot of the
strategy list. Ledger and strategy state are snapshotted before mutation and
restored if anything raises, so a failed call leaves no trace.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from vault import ledger
from vault.errors import (
    AlreadyAdded,
    DepositsDisabled,
    InsufficientBalance,
    InsufficientDepositRoom,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    InvalidOrder,
    InvalidStrategySet,
    StrategyNotEmpty,
    VaultError,
    WithdrawalsDisabled,
)
from vault.events import EventRecorder
from vault.fees import BASIS_POINTS, FeeEntry, FeeRecipient, FeeTable, MintHook, RecipientKind
from vault.ledger import VaultState, require_amount
from vault.runtime_config import VaultConfig
from vault.strategies import Strategy

LOG = logging.getLogger("vault.controller")


@dataclass
class Placement:
    """Underlying moved to or from one strategy."""
    index: int
    strategy: str
    amount: int


@dataclass
class DepositResult:
    account: str
    amount: int
    shares: int
    placements: List[Placement] = field(default_factory=list)
    buffered: int = 0


@dataclass
class WithdrawResult:
    account: str
    recipient: str
    amount: int
    shares: int
    from_buffer: int = 0
    pulls: List[Placement] = field(default_factory=list)


@dataclass
class FeeMint:
    recipient: str
    amount: int
    shares: int
    source: str


@dataclass
class RebaseResult:
    strategies: List[int]
    net_change: int
    fee_mints: List[FeeMint] = field(default_factory=list)
    total_staked: int = 0
    total_shares: int = 0

    @property
    def fee_shares(self) -> int:
        return sum(mint.shares for mint in self.fee_mints)


def _aux_for(aux_data: Any, index: int) -> Any:
    """Per-strategy aux data: sequences are indexed by strategy, anything else is forwarded."""
    if aux_data is None or isinstance(aux_data, (str, bytes)):
        return aux_data
    if isinstance(aux_data, (list, tuple)):
        return aux_data[index] if index < len(aux_data) else None
    return aux_data


class VaultController:
    """Liquid-staking vault over an ordered list of strategies."""

    def __init__(
        self,
        strategies: Optional[Sequence[Strategy]] = None,
        fees: Optional[FeeTable] = None,
        liquidity_buffer_bps: int = 0,
        events: Optional[EventRecorder] = None,
        deposits_enabled: bool = True,
        withdrawals_enabled: bool = True,
    ) -> None:
        self.state = VaultState()
        self.events = events or EventRecorder()
        self.deposits_enabled = bool(deposits_enabled)
        self.withdrawals_enabled = bool(withdrawals_enabled)
        self._fees = fees or FeeTable()
        self._strategies: List[Strategy] = []
        self._lock = threading.RLock()
        self.liquidity_buffer_bps = 0
        self.set_liquidity_buffer(liquidity_buffer_bps)
        for strategy in strategies or []:
            self.add_strategy(strategy)

    @classmethod
    def from_config(
        cls,
        cfg: VaultConfig,
        strategies: Optional[Sequence[Strategy]] = None,
        hooks: Optional[Mapping[str, MintHook]] = None,
    ) -> "VaultController":
        """Build a vault from parsed config; notify-on-mint recipients take their hook from `hooks`."""
        hooks = hooks or {}
        table = FeeTable()
        for fee in cfg.fees:
            if fee.notify_on_mint:
                if fee.recipient not in hooks:
                    raise InvalidFee(f"fee recipient {fee.recipient} wants mint notifications but has no hook")
                recipient = FeeRecipient(fee.recipient, RecipientKind.NOTIFY_ON_MINT, hooks[fee.recipient])
            else:
                recipient = FeeRecipient(fee.recipient)
            table.add(recipient, fee.basis_points)
        events = None
        if cfg.events_path:
            events = EventRecorder.to_path(
                cfg.events_path,
                max_bytes=cfg.events_max_bytes,
                backup_count=cfg.events_backup_count,
            )
        return cls(
            strategies=strategies,
            fees=table,
            liquidity_buffer_bps=cfg.liquidity_buffer_bps,
            events=events,
            deposits_enabled=cfg.deposits_enabled,
            withdrawals_enabled=cfg.withdrawals_enabled,
        )

    # ------------------------------------------------------------------
    # Transaction plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except VaultError as exc:
                LOG.warning("[vault] %s_failed err=%s", name, exc)
                raise

    @contextmanager
    def _atomic(self, strategies: Sequence[Strategy]) -> Iterator[None]:
        saved_state = ledger.copy_state(self.state)
        saved = [(strategy, strategy.snapshot()) for strategy in strategies]
        try:
            yield
        except BaseException:
            self.state.total_shares = saved_state.total_shares
            self.state.total_staked = saved_state.total_staked
            self.state.buffered = saved_state.buffered
            self.state.balances = saved_state.balances
            for strategy, snap in saved:
                strategy.restore(snap)
            raise

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def total_staked(self) -> int:
        return self.state.total_staked

    @property
    def total_shares(self) -> int:
        return self.state.total_shares

    @property
    def buffered(self) -> int:
        return self.state.buffered

    @property
    def share_price(self) -> float:
        return ledger.share_price(self.state)

    def balance_of(self, account: str) -> int:
        """Share balance of an account."""
        return ledger.balance_of(self.state, account)

    def underlying_balance_of(self, account: str) -> int:
        return ledger.underlying_balance_of(self.state, account)

    def shares_for_underlying(self, amount: int) -> int:
        return ledger.shares_for_underlying(self.state, amount)

    def underlying_for_shares(self, shares: int) -> int:
        return ledger.underlying_for_shares(self.state, shares)

    def accounts(self) -> Dict[str, int]:
        return dict(self.state.balances)

    def strategies(self) -> List[Strategy]:
        return list(self._strategies)

    def get_strategy(self, index: int) -> Strategy:
        with self._lock:
            return self._strategy_at(index)

    def fees(self) -> List[FeeEntry]:
        return self._fees.entries()

    def buffer_target(self) -> int:
        return self.state.total_staked * self.liquidity_buffer_bps // BASIS_POINTS

    def max_deposits(self) -> int:
        """Buffer target plus the headroom left in every strategy."""
        with self._lock:
            return self.buffer_target() + sum(s.headroom() for s in self._strategies)

    def min_deposits(self) -> int:
        """Sum of strategy floors that cannot be withdrawn."""
        with self._lock:
            return sum(s.get_min_deposits() for s in self._strategies)

    def can_deposit(self) -> int:
        with self._lock:
            if self._written_off():
                return 0
            return self._deposit_room(self._strategies, 0)

    def can_withdraw(self) -> int:
        with self._lock:
            return self.state.buffered + sum(s.drawable() for s in self._strategies)

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            out = ledger.snapshot(self.state)
            out["strategies"] = [
                {
                    "name": s.name,
                    "total_deposits": s.get_total_deposits(),
                    "max_deposits": s.get_max_deposits(),
                    "min_deposits": s.get_min_deposits(),
                    "deposit_change": s.deposit_change(),
                }
                for s in self._strategies
            ]
            return out

    def _strategy_at(self, index: int) -> Strategy:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._strategies):
            raise InvalidStrategySet(f"strategy index {index!r} not managed by vault")
        return self._strategies[index]

    def _deposit_room(self, strategies: Sequence[Strategy], incoming: int) -> int:
        target = (self.state.total_staked + incoming) * self.liquidity_buffer_bps // BASIS_POINTS
        buffer_room = max(0, target - self.state.buffered)
        return buffer_room + sum(s.headroom() for s in strategies)

    # ------------------------------------------------------------------
    # Deposit
    # ------------------------------------------------------------------

    def _written_off(self) -> bool:
        """Shares outstanding against zero stake; new underlying would accrue to them."""
        return self.state.total_shares > 0 and self.state.total_staked == 0

    def deposit(self, account: str, amount: int, aux_data: Any = None) -> DepositResult:
        """
        Mint shares for `amount` underlying and route it into strategies.

        Args:
            account: depositor receiving the shares
            amount: underlying units, > 0
            aux_data: forwarded to strategies; a list/tuple is indexed by strategy

        Returns:
            DepositResult with minted shares and per-strategy placements
        """
        with self._operation("deposit"):
            amount = require_amount(amount)
            if not self.deposits_enabled:
                raise DepositsDisabled("deposits are paused")
            if self._written_off():
                raise DepositsDisabled(
                    f"{self.state.total_shares} shares outstanding against zero stake"
                )
            strategies = list(self._strategies)
            room = self._deposit_room(strategies, amount)
            if amount > room:
                raise InsufficientDepositRoom(f"deposit {amount} exceeds room {room}")

            with self._atomic(strategies):
                shares = ledger.shares_for_underlying(self.state, amount)
                if shares <= 0:
                    raise InvalidAmount(f"deposit {amount} too small to mint a share")
                buffered_before = self.state.buffered
                self.state.total_staked += amount
                self.state.buffered += amount
                ledger.mint(self.state, account, shares)

                deficit = max(0, self.buffer_target() - buffered_before)
                keep = min(amount, deficit)
                placements = self._deploy(strategies, amount - keep, aux_data)

            result = DepositResult(
                account=account,
                amount=amount,
                shares=shares,
                placements=placements,
                buffered=amount - sum(p.amount for p in placements),
            )
            LOG.info(
                "[vault] deposit account=%s amount=%d shares=%d placed=%d buffered=%d",
                account,
                amount,
                shares,
                amount - result.buffered,
                self.state.buffered,
            )
            self.events.write(
                "vault_deposit",
                {
                    "account": account,
                    "amount": amount,
                    "shares": shares,
                    "placements": result.placements,
                    "buffered": self.state.buffered,
                    "total_staked": self.state.total_staked,
                    "total_shares": self.state.total_shares,
                },
            )
            return result

    def _deploy(self, strategies: Sequence[Strategy], amount: int, aux_data: Any) -> List[Placement]:
        """Push buffered underlying into strategies in priority order; leftovers stay buffered."""
        placements: List[Placement] = []
        remaining = amount
        for index, strategy in enumerate(strategies):
            if remaining <= 0:
                break
            room = strategy.headroom()
            if room <= 0:
                continue
            offer = min(remaining, room)
            accepted = strategy.deposit(offer, _aux_for(aux_data, index))
            if accepted != offer:
                raise InsufficientDepositRoom(
                    f"strategy {strategy.name} accepted {accepted} of {offer}"
                )
            self.state.buffered -= accepted
            remaining -= accepted
            placements.append(Placement(index=index, strategy=strategy.name, amount=accepted))
        return placements

    # ------------------------------------------------------------------
    # Withdraw
    # ------------------------------------------------------------------

    def withdraw(self, account: str, recipient: str, amount: int, aux_data: Any = None) -> WithdrawResult:
        """Burn the account's shares for `amount` underlying paid to `recipient`."""
        with self._operation("withdraw"):
            amount = require_amount(amount)
            if not self.withdrawals_enabled:
                raise WithdrawalsDisabled("withdrawals are paused")
            strategies = list(self._strategies)

            shares = ledger.shares_to_burn(self.state, amount)
            held = ledger.balance_of(self.state, account)
            if shares > held:
                raise InsufficientBalance(f"account={account} holds {held} shares, needs {shares}")
            if amount > self.state.total_staked:
                raise InsufficientBalance(f"withdrawal {amount} exceeds total staked {self.state.total_staked}")

            from_buffer, plan = self._plan_withdrawal(strategies, amount)

            with self._atomic(strategies):
                pulls: List[Placement] = []
                for index, take in plan:
                    strategy = strategies[index]
                    released = strategy.withdraw(take, _aux_for(aux_data, index))
                    if released != take:
                        raise InsufficientLiquidity(
                            f"strategy {strategy.name} released {released} of {take}"
                        )
                    pulls.append(Placement(index=index, strategy=strategy.name, amount=released))
                ledger.burn(self.state, account, shares)
                self.state.total_staked -= amount
                self.state.buffered -= from_buffer

            LOG.info(
                "[vault] withdraw account=%s recipient=%s amount=%d shares=%d from_buffer=%d",
                account,
                recipient,
                amount,
                shares,
                from_buffer,
            )
            self.events.write(
                "vault_withdraw",
                {
                    "account": account,
                    "recipient": recipient,
                    "amount": amount,
                    "shares": shares,
                    "from_buffer": from_buffer,
                    "pulls": pulls,
                    "total_staked": self.state.total_staked,
                    "total_shares": self.state.total_shares,
                },
            )
            return WithdrawResult(
                account=account,
                recipient=recipient,
                amount=amount,
                shares=shares,
                from_buffer=from_buffer,
                pulls=pulls,
            )

    def _plan_withdrawal(self, strategies: Sequence[Strategy], amount: int) -> Tuple[int, List[Tuple[int, int]]]:
        from_buffer = min(self.state.buffered, amount)
        remaining = amount - from_buffer
        plan: List[Tuple[int, int]] = []
        for index in range(len(strategies) - 1, -1, -1):
            if remaining <= 0:
                break
            take = min(remaining, strategies[index].drawable())
            if take <= 0:
                continue
            plan.append((index, take))
            remaining -= take
        if remaining > 0:
            raise InsufficientLiquidity(f"withdrawal {amount} short by {remaining}")
        return from_buffer, plan

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def _validate_indices(self, strategy_indices: Sequence[int], count: int) -> List[int]:
        indices = list(strategy_indices or [])
        if not indices:
            raise InvalidStrategySet("no strategies to reconcile")
        for index in indices:
            if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < count:
                raise InvalidStrategySet(f"strategy index {index!r} not managed by vault")
        if len(set(indices)) != len(indices):
            raise InvalidStrategySet(f"duplicate strategy indices {indices}")
        return indices

    def preview_reconcile(self, strategy_indices: Sequence[int]) -> Tuple[int, int]:
        """(net_change, total_fees) a reconcile of these strategies would apply now."""
        with self._operation("preview_reconcile"):
            strategies = list(self._strategies)
            indices = self._validate_indices(strategy_indices, len(strategies))
            net_change = sum(strategies[i].deposit_change() for i in indices)
            if net_change <= 0:
                return net_change, 0
            pending = [strategies[i].get_pending_fees() for i in indices]
            vault_total = sum(amount for _, amount in self._fees.split(net_change))
            strategy_total = sum(_fit_strategy_fees(net_change - vault_total, pending))
            return net_change, strategy_total + vault_total

    def reconcile(self, strategy_indices: Sequence[int], aux_data: Any = None) -> RebaseResult:
        """
        Rebase: fold the named strategies' gains/losses into total_staked.

        A net gain mints fee shares priced at the pre-rebase rate; a net loss
        lowers total_staked and dilutes every holder proportionally.
        """
        with self._operation("reconcile"):
            strategies = list(self._strategies)
            indices = self._validate_indices(strategy_indices, len(strategies))

            with self._atomic([strategies[i] for i in indices]):
                net_change = 0
                strategy_fees: List[Tuple[FeeRecipient, int, str]] = []
                for index in indices:
                    strategy = strategies[index]
                    net_change += strategy.deposit_change()
                    recipients, amounts = strategy.update_deposits(aux_data)
                    if len(recipients) != len(amounts):
                        raise InvalidAmount(f"strategy {strategy.name} returned mismatched fee arrays")
                    for account, amount in zip(recipients, amounts):
                        strategy_fees.append((FeeRecipient(str(account)), int(amount), strategy.name))

                fee_mints: List[FeeMint] = []
                notify: List[Tuple[FeeRecipient, int]] = []
                if net_change > 0:
                    fee_mints, notify = self._mint_fees(net_change, strategy_fees)
                    self.state.total_staked += net_change
                elif net_change < 0:
                    if strategy_fees:
                        LOG.info("[vault] reconcile dropping strategy fees on net loss=%d", net_change)
                    self.state.total_staked += net_change

                for recipient, shares in notify:
                    recipient.notify(shares)

            result = RebaseResult(
                strategies=indices,
                net_change=net_change,
                fee_mints=fee_mints,
                total_staked=self.state.total_staked,
                total_shares=self.state.total_shares,
            )
            LOG.info(
                "[vault] reconcile strategies=%s net_change=%d fee_shares=%d total_staked=%d",
                indices,
                net_change,
                result.fee_shares,
                result.total_staked,
            )
            for mint in fee_mints:
                self.events.write("vault_fee_mint", mint)
            self.events.write(
                "vault_rebase",
                {
                    "strategies": indices,
                    "net_change": net_change,
                    "fee_shares": result.fee_shares,
                    "total_staked": result.total_staked,
                    "total_shares": result.total_shares,
                },
            )
            return result

    def _mint_fees(
        self,
        reward: int,
        strategy_fees: List[Tuple[FeeRecipient, int, str]],
    ) -> Tuple[List[FeeMint], List[Tuple[FeeRecipient, int]]]:
        vault_fees = [(recipient, amount, "vault") for recipient, amount in self._fees.split(reward)]
        vault_total = sum(amount for _, amount, _ in vault_fees)
        requested = [amount for _, amount, _ in strategy_fees]
        fitted = _fit_strategy_fees(reward - vault_total, requested)
        if fitted != [max(0, amount) for amount in requested]:
            LOG.warning(
                "[vault] strategy fees %d scaled to %d to fit reward=%d vault_fees=%d",
                sum(requested),
                sum(fitted),
                reward,
                vault_total,
            )
        fees = [(recipient, amount, source) for (recipient, _, source), amount in zip(strategy_fees, fitted)]
        fees.extend(vault_fees)

        # price every fee against the same pre-rebase state so mint order cannot shift value
        priced = [
            (recipient, amount, source, ledger.shares_for_underlying(self.state, amount))
            for recipient, amount, source in fees
            if amount > 0
        ]
        mints: List[FeeMint] = []
        notify: List[Tuple[FeeRecipient, int]] = []
        for recipient, amount, source, shares in priced:
            if shares <= 0:
                continue
            ledger.mint(self.state, recipient.account, shares)
            mints.append(FeeMint(recipient=recipient.account, amount=amount, shares=shares, source=source))
            notify.append((recipient, shares))
        return mints, notify

    # ------------------------------------------------------------------
    # Share transfers
    # ------------------------------------------------------------------

    def _move_shares(self, sender: str, recipient: str, shares: int) -> None:
        ledger.move(self.state, sender, recipient, shares)
        LOG.info("[vault] transfer sender=%s recipient=%s shares=%d", sender, recipient, shares)
        self.events.write("vault_transfer", {"sender": sender, "recipient": recipient, "shares": shares})

    def transfer(self, sender: str, recipient: str, shares: int) -> int:
        with self._operation("transfer"):
            shares = require_amount(shares, "shares")
            self._move_shares(sender, recipient, shares)
            return shares

    def transfer_underlying(self, sender: str, recipient: str, amount: int) -> int:
        """Move shares worth `amount` underlying (rounded down); returns shares moved."""
        with self._operation("transfer_underlying"):
            amount = require_amount(amount)
            shares = ledger.shares_for_underlying(self.state, amount)
            if shares <= 0:
                raise InvalidAmount(f"transfer {amount} too small to move a share")
            self._move_shares(sender, recipient, shares)
            return shares

    # ------------------------------------------------------------------
    # Strategy administration
    # ------------------------------------------------------------------

    def _strategy_event(self, action: str, **extra: Any) -> None:
        payload = {"action": action, "strategies": [s.name for s in self._strategies]}
        payload.update(extra)
        self.events.write("vault_strategy_change", payload)

    def add_strategy(self, strategy: Strategy) -> int:
        with self._operation("add_strategy"):
            if not isinstance(strategy, Strategy):
                raise TypeError(f"expected Strategy, got {type(strategy).__name__}")
            if any(existing is strategy for existing in self._strategies):
                raise AlreadyAdded(f"strategy {strategy.name} already added")
            self._strategies.append(strategy)
            index = len(self._strategies) - 1
            LOG.info("[vault] add_strategy name=%s index=%d", strategy.name, index)
            self._strategy_event("add", index=index)
            return index

    def remove_strategy(self, index: int) -> Strategy:
        """Drop a drained strategy; one still holding deposits must be emptied first."""
        with self._operation("remove_strategy"):
            strategy = self._strategy_at(index)
            if strategy.get_total_deposits() != 0 or strategy.deposit_change() != 0:
                raise StrategyNotEmpty(
                    f"strategy {strategy.name} holds {strategy.get_total_deposits()} "
                    f"(+{strategy.deposit_change()} unreconciled)"
                )
            self._strategies.pop(index)
            LOG.info("[vault] remove_strategy name=%s index=%d", strategy.name, index)
            self._strategy_event("remove", index=index)
            return strategy

    def reorder_strategies(self, new_order: Sequence[int]) -> None:
        with self._operation("reorder_strategies"):
            order = list(new_order or [])
            count = len(self._strategies)
            if any(isinstance(i, bool) or not isinstance(i, int) for i in order):
                raise InvalidOrder(f"order must be integer indices: {order}")
            if sorted(order) != list(range(count)):
                raise InvalidOrder(f"order {order} is not a permutation of {count} strategies")
            self._strategies = [self._strategies[i] for i in order]
            LOG.info("[vault] reorder_strategies order=%s", order)
            self._strategy_event("reorder", order=order)

    def strategy_deposit(self, index: int, amount: int, aux_data: Any = None) -> int:
        """Move buffered underlying into one strategy."""
        with self._operation("strategy_deposit"):
            amount = require_amount(amount)
            strategy = self._strategy_at(index)
            if amount > self.state.buffered:
                raise InsufficientLiquidity(f"buffer holds {self.state.buffered}, requested {amount}")
            if amount > strategy.headroom():
                raise InsufficientDepositRoom(f"strategy {strategy.name} has room {strategy.headroom()}")
            with self._atomic([strategy]):
                accepted = strategy.deposit(amount, aux_data)
                if accepted != amount:
                    raise InsufficientDepositRoom(f"strategy {strategy.name} accepted {accepted} of {amount}")
                self.state.buffered -= accepted
            LOG.info("[vault] strategy_deposit name=%s amount=%d", strategy.name, amount)
            self._strategy_event("deposit", index=index, amount=amount)
            return accepted

    def strategy_withdraw(self, index: int, amount: int, aux_data: Any = None) -> int:
        """Pull underlying from one strategy back into the buffer."""
        with self._operation("strategy_withdraw"):
            amount = require_amount(amount)
            strategy = self._strategy_at(index)
            if amount > strategy.drawable():
                raise InsufficientLiquidity(f"strategy {strategy.name} can release {strategy.drawable()}")
            with self._atomic([strategy]):
                released = strategy.withdraw(amount, aux_data)
                if released != amount:
                    raise InsufficientLiquidity(f"strategy {strategy.name} released {released} of {amount}")
                self.state.buffered += released
            LOG.info("[vault] strategy_withdraw name=%s amount=%d", strategy.name, amount)
            self._strategy_event("withdraw", index=index, amount=amount)
            return released

    # ------------------------------------------------------------------
    # Fees, buffer, pause switches
    # ------------------------------------------------------------------

    def add_fee(self, recipient: FeeRecipient | str, basis_points: int) -> FeeEntry:
        with self._operation("add_fee"):
            return self._fees.add(recipient, basis_points)

    def update_fee(self, index: int, recipient: FeeRecipient | str, basis_points: int) -> None:
        with self._operation("update_fee"):
            self._fees.update(index, recipient, basis_points)

    def set_liquidity_buffer(self, basis_points: int) -> None:
        """Buffer target as basis points of total_staked; values above 10000 keep more than the stake idle."""
        with self._operation("set_liquidity_buffer"):
            self.liquidity_buffer_bps = require_amount(basis_points, "liquidity_buffer_bps", allow_zero=True)
            LOG.info("[vault] liquidity_buffer bps=%d", self.liquidity_buffer_bps)

    def set_deposits_enabled(self, enabled: bool) -> None:
        with self._lock:
            self.deposits_enabled = bool(enabled)
            LOG.info("[vault] deposits_enabled=%s", self.deposits_enabled)

    def set_withdrawals_enabled(self, enabled: bool) -> None:
        with self._lock:
            self.withdrawals_enabled = bool(enabled)
            LOG.info("[vault] withdrawals_enabled=%s", self.withdrawals_enabled)


def _fit_strategy_fees(available: int, requested: Sequence[int]) -> List[int]:
    """
    Scale strategy-reported fees down pro rata so they fit in `available`.

    Negative requests count as zero. Fees already within budget pass through
    unchanged; otherwise each is floored to its share of the budget.
    """
    amounts = [max(0, int(amount)) for amount in requested]
    total = sum(amounts)
    budget = max(0, available)
    if total <= budget:
        return amounts
    return [amount * budget // total for amount in amounts]


__all__ = [
    "Placement",
    "DepositResult",
    "WithdrawResult",
    "FeeMint",
    "RebaseResult",
    "VaultController",
]
