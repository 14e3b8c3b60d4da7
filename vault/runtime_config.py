from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from vault.fees import BASIS_POINTS

LOG = logging.getLogger("vault.runtime_config")

_DEFAULT_PATH = Path(os.getenv("VAULT_CONFIG") or "config/vault.yaml")


@lru_cache(maxsize=8)
def load_runtime_config(path: Path | str | None = None) -> Dict[str, Any]:
    """
    Load vault.yaml once per process.

    A missing file yields {}; a malformed file raises yaml.YAMLError so a
    misconfigured vault never boots with silent defaults.
    """
    cfg_path = Path(path) if path is not None else _DEFAULT_PATH
    if not cfg_path.exists():
        LOG.info("[config] %s not found, using defaults", cfg_path)
        return {}
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Vault config
# ---------------------------------------------------------------------------

@dataclass
class FeeConfig:
    recipient: str
    basis_points: int
    notify_on_mint: bool = False


@dataclass
class VaultConfig:
    """Parsed vault section of the runtime configuration."""
    liquidity_buffer_bps: int = 0
    deposits_enabled: bool = True
    withdrawals_enabled: bool = True
    fees: List[FeeConfig] = field(default_factory=list)
    events_path: Optional[str] = None
    events_max_bytes: int = 10_000_000
    events_backup_count: int = 5


@dataclass
class StrategyConfig:
    name: str
    max_deposits: int
    min_deposits: int = 0
    fee_bps: int = 0
    fee_recipient: Optional[str] = None


def _clamp_bps(value: Any, name: str, cap: Optional[int] = BASIS_POINTS) -> int:
    bps = int(value or 0)
    if bps < 0:
        LOG.warning("[config] %s=%s clamped to 0", name, bps)
        return 0
    if cap is not None and bps > cap:
        LOG.warning("[config] %s=%s clamped to %d", name, bps, cap)
        return cap
    return bps


def get_vault_config(cfg: Dict[str, Any] | None = None) -> VaultConfig:
    """
    Load the vault section from runtime configuration.

    Args:
        cfg: Optional pre-loaded runtime config dict

    Returns:
        VaultConfig with validated values
    """
    if cfg is None:
        cfg = load_runtime_config()

    vault_cfg = cfg.get("vault", {}) or {}
    events_cfg = vault_cfg.get("events", {}) or {}

    fees: List[FeeConfig] = []
    for entry in vault_cfg.get("fees", []) or []:
        if not isinstance(entry, dict) or not entry.get("recipient"):
            LOG.warning("[config] skipping malformed fee entry %r", entry)
            continue
        fees.append(
            FeeConfig(
                recipient=str(entry["recipient"]),
                basis_points=_clamp_bps(entry.get("basis_points"), "fees.basis_points"),
                notify_on_mint=bool(entry.get("notify_on_mint", False)),
            )
        )

    events_path = events_cfg.get("path") or os.getenv("VAULT_EVENTS_PATH") or None

    return VaultConfig(
        liquidity_buffer_bps=_clamp_bps(vault_cfg.get("liquidity_buffer_bps", 0), "liquidity_buffer_bps", cap=None),
        deposits_enabled=bool(vault_cfg.get("deposits_enabled", True)),
        withdrawals_enabled=bool(vault_cfg.get("withdrawals_enabled", True)),
        fees=fees,
        events_path=events_path,
        events_max_bytes=max(0, int(events_cfg.get("max_bytes", 10_000_000))),
        events_backup_count=max(0, int(events_cfg.get("backup_count", 5))),
    )


def get_strategy_configs(cfg: Dict[str, Any] | None = None) -> List[StrategyConfig]:
    """Parse the strategies list in priority order."""
    if cfg is None:
        cfg = load_runtime_config()

    out: List[StrategyConfig] = []
    for entry in cfg.get("strategies", []) or []:
        if not isinstance(entry, dict) or not entry.get("name"):
            LOG.warning("[config] skipping malformed strategy entry %r", entry)
            continue
        out.append(
            StrategyConfig(
                name=str(entry["name"]),
                max_deposits=max(0, int(entry.get("max_deposits", 0))),
                min_deposits=max(0, int(entry.get("min_deposits", 0))),
                fee_bps=_clamp_bps(entry.get("fee_bps", 0), "strategies.fee_bps"),
                fee_recipient=entry.get("fee_recipient"),
            )
        )
    return out


__all__ = [
    "load_runtime_config",
    "FeeConfig",
    "VaultConfig",
    "StrategyConfig",
    "get_vault_config",
    "get_strategy_configs",
]
