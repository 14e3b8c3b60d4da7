"""
Vault Package

Off-chain ledger for a liquid-staking vault: users deposit an underlying
token and hold rebasing shares in a pool spread across pluggable
strategies.

Components:
    ledger.py          - VaultState and all share <-> underlying conversion
    fees.py            - Fee table and typed fee recipients
    strategies.py      - Strategy interface + SimulatedStrategy
    controller.py      - Deposit/withdraw routing, reconciliation, admin
    runtime_config.py  - config/vault.yaml loading
    events.py          - Observability records (JSONL)
    simulation.py      - Scenario replay with pandas history

Usage:
    from vault import VaultController, SimulatedStrategy

    a = SimulatedStrategy("validators", max_deposits=600)
    b = SimulatedStrategy("restaking", max_deposits=500)
    vault = VaultController(strategies=[a, b])
    vault.add_fee("treasury", 1000)

    vault.deposit("alice", 1000)
    a.simulate_reward(100)
    vault.reconcile([0, 1])
"""
from vault.controller import (
    DepositResult,
    FeeMint,
    Placement,
    RebaseResult,
    VaultController,
    WithdrawResult,
)
from vault.fees import FeeEntry, FeeRecipient, FeeTable, RecipientKind
from vault.ledger import VaultState
from vault.strategies import SimulatedStrategy, Strategy

__all__ = [
    "VaultController",
    "VaultState",
    "DepositResult",
    "WithdrawResult",
    "RebaseResult",
    "FeeMint",
    "Placement",
    "FeeTable",
    "FeeEntry",
    "FeeRecipient",
    "RecipientKind",
    "Strategy",
    "SimulatedStrategy",
]
