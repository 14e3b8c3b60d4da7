import json
import threading
from pathlib import Path

import pytest

from vault.events import EventRecorder, validate_event
from vault.fees import RecipientKind
from vault.log_utils import JsonlLogger, get_logger, iter_jsonl, safe_dump


def _read_lines(path: Path):
    with path.open("r", encoding="utf-8") as fh:
        return [json.loads(line) for line in fh if line.strip()]


def test_jsonl_write(tmp_path: Path) -> None:
    log_path = tmp_path / "events.jsonl"
    logger = JsonlLogger(log_path, max_bytes=10_000, backup_count=2)

    logger.write({"foo": "bar"})
    logger.write({"baz": 123})
    lines = logger.read()

    assert len(lines) == 2
    assert lines[0]["foo"] == "bar"
    assert lines[1]["baz"] == 123


def test_rotation_and_archive(tmp_path: Path) -> None:
    root = tmp_path / "logs"
    root.mkdir()
    log_path = root / "rotate.log"

    # Small max bytes to force rotation quickly
    logger = JsonlLogger(log_path, max_bytes=100, backup_count=2)
    for idx in range(10):
        logger.write({"idx": idx, "text": "x" * 20})

    assert log_path.exists()
    assert log_path.with_name("rotate.1.log").exists()

    archives = list((root / "archive").glob("rotate.2.log.*.gz"))
    assert archives, "Expected archived gzip file"
    archived_lines = list(iter_jsonl(archives[0]))
    assert archived_lines, "Archived file should contain data"


def test_get_logger_relative_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from vault import log_utils

    monkeypatch.setattr(log_utils, "REPO_ROOT", tmp_path)
    logger = get_logger("logs/vault/events.jsonl", max_bytes=1000, backup_count=1)
    logger.write({"hello": "world"})

    target = tmp_path / "logs" / "vault" / "events.jsonl"
    assert logger.path == target
    assert _read_lines(target)[0]["hello"] == "world"


def test_safe_dump_coerces_enums_and_sets() -> None:
    out = safe_dump({"kind": RecipientKind.NOTIFY_ON_MINT, "ids": {3}, "hook": len})
    assert out == {"kind": "notify_on_mint", "ids": [3], "hook": "len"}
    assert safe_dump(None) == {}
    assert safe_dump(5) == {"value": 5}


def test_validate_event_requires_fields() -> None:
    validate_event("vault_transfer", {"sender": "a", "recipient": "b", "shares": 1})
    validate_event("unknown_event", {})
    with pytest.raises(ValueError):
        validate_event("vault_transfer", {"sender": "a"})


def test_recorder_skips_invalid_events_and_keeps_recent() -> None:
    recorder = EventRecorder(keep=2)
    recorder.write("vault_transfer", {"sender": "a"})
    assert recorder.records == []

    for shares in (1, 2, 3):
        recorder.write("vault_transfer", {"sender": "a", "recipient": "b", "shares": shares})
    assert [r["shares"] for r in recorder.of_type("vault_transfer")] == [2, 3]
    assert all("ts" in r for r in recorder.records)
    recorder.clear()
    assert recorder.records == []


def test_vault_operations_append_jsonl(tmp_path: Path, vault) -> None:
    vault.events = EventRecorder.to_path(str(tmp_path / "events.jsonl"))
    vault.deposit("alice", 1000)
    vault.withdraw("alice", "bob", 100)

    lines = _read_lines(tmp_path / "events.jsonl")
    assert [line["event_type"] for line in lines] == ["vault_deposit", "vault_withdraw"]
    deposit = lines[0]
    assert deposit["placements"] == [
        {"index": 0, "strategy": "a", "amount": 600},
        {"index": 1, "strategy": "b", "amount": 400},
    ]
    assert deposit["total_staked"] == 1000
    assert "pid" in deposit and "hostname" in deposit


def test_event_write_failure_does_not_fail_operation(vault) -> None:
    class BrokenLogger:
        def write(self, record):
            raise OSError("disk full")

    vault.events = EventRecorder(logger=BrokenLogger())
    result = vault.deposit("alice", 100)
    assert result.shares == 100
    assert vault.total_staked == 100
    assert len(vault.events.of_type("vault_deposit")) == 1


def test_iter_jsonl_missing_file(tmp_path: Path) -> None:
    assert list(iter_jsonl(tmp_path / "absent.jsonl")) == []
    assert JsonlLogger(tmp_path / "absent.jsonl", max_bytes=100, backup_count=1).read() == []


def test_concurrent_deposits_are_journaled_in_ledger_order(tmp_path: Path, vault) -> None:
    vault.events = EventRecorder.to_path(str(tmp_path / "events.jsonl"))

    def worker(account: str) -> None:
        for _ in range(25):
            vault.deposit(account, 3)

    threads = [threading.Thread(target=worker, args=(f"acct{i}",)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    on_disk = [line["total_shares"] for line in _read_lines(tmp_path / "events.jsonl")]
    in_memory = [record["total_shares"] for record in vault.events.of_type("vault_deposit")]
    assert on_disk == in_memory == list(range(3, 301, 3))
