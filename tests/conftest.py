"""
Pytest configuration and shared fixtures for test suite.
"""
from __future__ import annotations

import os
from typing import Tuple

import pytest

from vault.controller import VaultController
from vault.runtime_config import load_runtime_config
from vault.strategies import SimulatedStrategy

# Force safe defaults even if .env sets production values.
os.environ["ENV"] = "test"
os.environ.pop("VAULT_EVENTS_PATH", None)


@pytest.fixture
def two_strategies() -> Tuple[SimulatedStrategy, SimulatedStrategy]:
    """Strategy A (cap 600) ahead of strategy B (cap 500), no floors."""
    return SimulatedStrategy("a", max_deposits=600), SimulatedStrategy("b", max_deposits=500)


@pytest.fixture
def vault(two_strategies) -> VaultController:
    return VaultController(strategies=list(two_strategies))


@pytest.fixture
def fee_vault(two_strategies) -> VaultController:
    """Two-strategy vault with a single 10% treasury fee."""
    controller = VaultController(strategies=list(two_strategies))
    controller.add_fee("treasury", 1000)
    return controller


@pytest.fixture
def three_strategies() -> Tuple[SimulatedStrategy, SimulatedStrategy, SimulatedStrategy]:
    return (
        SimulatedStrategy("s1", max_deposits=1000, min_deposits=10),
        SimulatedStrategy("s2", max_deposits=2000, min_deposits=20),
        SimulatedStrategy("s3", max_deposits=10000, min_deposits=10),
    )


@pytest.fixture(autouse=True, scope="function")
def _reset_config_cache():
    """
    load_runtime_config is lru_cached per path; clear it around each test
    so tmp_path configs never leak between tests.
    """
    load_runtime_config.cache_clear()
    yield
    load_runtime_config.cache_clear()
