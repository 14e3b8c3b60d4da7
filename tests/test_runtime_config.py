from pathlib import Path

import yaml

from vault.runtime_config import get_strategy_configs, get_vault_config, load_runtime_config

ROOT = Path(__file__).resolve().parents[1]


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "vault.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_shipped_config_parses() -> None:
    cfg = load_runtime_config(ROOT / "config" / "vault.yaml")
    vault_cfg = get_vault_config(cfg)
    assert vault_cfg.liquidity_buffer_bps == 200
    assert [(f.recipient, f.basis_points) for f in vault_cfg.fees] == [("treasury", 1000)]
    strategies = get_strategy_configs(cfg)
    assert [s.name for s in strategies] == ["validators", "restaking"]
    assert strategies[1].fee_recipient == "operators"


def test_missing_file_yields_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("VAULT_EVENTS_PATH", raising=False)
    cfg = load_runtime_config(tmp_path / "absent.yaml")
    assert cfg == {}
    vault_cfg = get_vault_config(cfg)
    assert vault_cfg.liquidity_buffer_bps == 0
    assert vault_cfg.fees == []
    assert vault_cfg.events_path is None
    assert get_strategy_configs(cfg) == []


def test_values_are_clamped_and_malformed_entries_skipped(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "vault": {
                "liquidity_buffer_bps": 25_000,
                "deposits_enabled": False,
                "fees": [{"recipient": "treasury", "basis_points": -5}, {"basis_points": 100}, "junk"],
                "events": {"path": "logs/custom.jsonl", "backup_count": -1},
            },
            "strategies": [
                {"name": "a", "max_deposits": 1000, "min_deposits": -3, "fee_bps": 20_000},
                {"max_deposits": 5},
            ],
        },
    )
    cfg = load_runtime_config(path)
    vault_cfg = get_vault_config(cfg)
    assert vault_cfg.liquidity_buffer_bps == 25_000
    assert vault_cfg.deposits_enabled is False
    assert [(f.recipient, f.basis_points) for f in vault_cfg.fees] == [("treasury", 0)]
    assert vault_cfg.events_path == "logs/custom.jsonl"
    assert vault_cfg.events_backup_count == 0

    strategies = get_strategy_configs(cfg)
    assert len(strategies) == 1
    assert strategies[0].min_deposits == 0
    assert strategies[0].fee_bps == 10_000


def test_events_path_falls_back_to_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("VAULT_EVENTS_PATH", str(tmp_path / "env.jsonl"))
    vault_cfg = get_vault_config({"vault": {}})
    assert vault_cfg.events_path == str(tmp_path / "env.jsonl")


def test_config_is_cached_per_path(tmp_path: Path) -> None:
    path = _write(tmp_path, {"vault": {"liquidity_buffer_bps": 100}})
    first = load_runtime_config(path)
    path.write_text(yaml.safe_dump({"vault": {"liquidity_buffer_bps": 300}}), encoding="utf-8")
    assert load_runtime_config(path) is first
    load_runtime_config.cache_clear()
    assert load_runtime_config(path)["vault"]["liquidity_buffer_bps"] == 300


def test_root_config_reads_environment(monkeypatch) -> None:
    import importlib

    import config

    monkeypatch.setenv("SIMULATION_OUT_DIR", "out/sim")
    monkeypatch.setenv("VAULT_CONFIG", "config/other.yaml")
    reloaded = importlib.reload(config)
    assert reloaded.SIMULATION_OUT_DIR == "out/sim"
    assert reloaded.VAULT_CONFIG_PATH == "config/other.yaml"
    monkeypatch.delenv("SIMULATION_OUT_DIR")
    monkeypatch.delenv("VAULT_CONFIG")
    importlib.reload(config)
