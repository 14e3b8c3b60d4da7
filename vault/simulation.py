"""
Vault Scenario Simulator

Replays a list of steps (deposits, withdrawals, strategy rewards/slashes,
reconciliations) against a VaultController built from YAML config and
records a ledger snapshot after every step.

Scenario format:
    vault:        same section as config/vault.yaml
    strategies:   [{name, max_deposits, min_deposits, fee_bps, fee_recipient}]
    steps:        [{day, action, ...action fields}]

Actions:
    deposit    account, amount
    withdraw   account, recipient (default account), amount
    transfer   sender, recipient, shares
    reward     strategy, amount
    slash      strategy, amount
    accrue     strategy (or all), apr_bps, days
    reconcile  strategies (default all)

A step with `allow_failure: true` records a VaultError in the `error`
column instead of aborting the run.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from vault import ledger
from vault.controller import VaultController
from vault.errors import VaultError
from vault.runtime_config import get_strategy_configs, get_vault_config
from vault.strategies import SimulatedStrategy

LOG = logging.getLogger("vault.simulation")

HISTORY_COLUMNS = [
    "step",
    "day",
    "action",
    "total_staked",
    "total_shares",
    "buffered",
    "share_price",
    "accounts",
    "net_change",
    "error",
]


def build_vault(cfg: Mapping[str, Any]) -> Tuple[VaultController, List[SimulatedStrategy]]:
    """Create a controller and its simulated strategies from a config/scenario dict."""
    vault_cfg = get_vault_config(dict(cfg))
    strategies = [
        SimulatedStrategy(
            name=s.name,
            max_deposits=s.max_deposits,
            min_deposits=s.min_deposits,
            fee_bps=s.fee_bps,
            fee_recipient=s.fee_recipient,
        )
        for s in get_strategy_configs(dict(cfg))
    ]
    return VaultController.from_config(vault_cfg, strategies), strategies


def _strategy_targets(controller: VaultController, step: Mapping[str, Any]) -> List[SimulatedStrategy]:
    target = step.get("strategy", "all")
    strategies = controller.strategies()
    if target == "all":
        return [s for s in strategies if isinstance(s, SimulatedStrategy)]
    if isinstance(target, int):
        picked = controller.get_strategy(target)
    else:
        matches = [s for s in strategies if s.name == target]
        if not matches:
            raise KeyError(f"unknown strategy {target!r}")
        picked = matches[0]
    if not isinstance(picked, SimulatedStrategy):
        raise TypeError(f"strategy {picked.name} does not support simulation hooks")
    return [picked]


def apply_step(controller: VaultController, step: Mapping[str, Any]) -> Optional[int]:
    """Execute one step; returns the rebase net change for reconcile steps."""
    action = str(step.get("action", "")).lower()
    if action == "deposit":
        controller.deposit(step["account"], int(step["amount"]))
    elif action == "withdraw":
        account = step["account"]
        controller.withdraw(account, step.get("recipient", account), int(step["amount"]))
    elif action == "transfer":
        controller.transfer(step["sender"], step["recipient"], int(step["shares"]))
    elif action == "reward":
        for strategy in _strategy_targets(controller, step):
            strategy.simulate_reward(int(step["amount"]))
    elif action == "slash":
        for strategy in _strategy_targets(controller, step):
            strategy.simulate_slash(int(step["amount"]))
    elif action == "accrue":
        for strategy in _strategy_targets(controller, step):
            strategy.accrue(int(step.get("apr_bps", 0)), float(step.get("days", 0)))
    elif action == "reconcile":
        indices = step.get("strategies") or list(range(len(controller.strategies())))
        return controller.reconcile(indices, step.get("aux_data")).net_change
    else:
        raise ValueError(f"unknown scenario action {action!r}")
    return None


def run_scenario(steps: Sequence[Mapping[str, Any]], controller: VaultController) -> pd.DataFrame:
    """Run steps in order and return the ledger history as a DataFrame."""
    rows: List[Dict[str, Any]] = []
    for idx, step in enumerate(steps):
        error: Optional[str] = None
        net_change: Optional[int] = None
        try:
            net_change = apply_step(controller, step)
        except VaultError as exc:
            if not step.get("allow_failure"):
                raise
            error = type(exc).__name__
            LOG.info("[sim] step=%d action=%s failed err=%s", idx, step.get("action"), exc)

        snap = ledger.snapshot(controller.state)
        rows.append(
            {
                "step": idx,
                "day": float(step.get("day", 0)),
                "action": step.get("action"),
                "total_staked": snap["total_staked"],
                "total_shares": snap["total_shares"],
                "buffered": snap["buffered"],
                "share_price": snap["share_price"],
                "accounts": snap["accounts"],
                "net_change": net_change,
                "error": error,
            }
        )
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def performance_metrics(history: pd.DataFrame) -> Dict[str, float]:
    """Share-price growth, annualised return, volatility and max drawdown of a run."""
    if history.empty:
        return {"total_return": 0.0, "annualized_return": 0.0, "volatility": 0.0, "max_drawdown": 0.0}

    daily = history.groupby("day")["share_price"].last().sort_index()
    prices = daily.to_numpy(dtype=float)
    start, end = prices[0], prices[-1]
    total_return = end / start - 1 if start > 0 else 0.0

    span_days = float(daily.index[-1] - daily.index[0])
    annualized = (end / start) ** (365.0 / span_days) - 1 if span_days > 0 and start > 0 else 0.0

    returns = np.diff(prices) / prices[:-1] if len(prices) > 1 else np.array([])
    volatility = float(np.std(returns) * np.sqrt(365)) if returns.size > 1 else 0.0

    peaks = np.maximum.accumulate(prices)
    max_dd = float((prices / peaks - 1).min())

    return {
        "total_return": float(total_return),
        "annualized_return": float(annualized),
        "volatility": volatility,
        "max_drawdown": max_dd,
    }


__all__ = ["HISTORY_COLUMNS", "build_vault", "apply_step", "run_scenario", "performance_metrics"]
