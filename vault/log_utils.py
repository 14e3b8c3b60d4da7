"""
JSONL journal for vault records.

One JSON object per line, appended under a lock and fsynced. When a write
would push the live file past max_bytes the file rolls to
`<stem>.1<suffix>`, older rolls shift up by one, and the roll that falls
off the end is gzipped into `archive/` with a UTC stamp.
"""

from __future__ import annotations

import datetime as _dt
import enum
import gzip
import json
import os
import shutil
import socket
import threading
from dataclasses import asdict, is_dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, MutableMapping

REPO_ROOT = Path(__file__).resolve().parent.parent
_HOSTNAME = socket.gethostname()


class JsonlLogger:
    """Append-only JSONL file with size-based rolling."""

    def __init__(self, path: Path, max_bytes: int, backup_count: int) -> None:
        self._path = Path(path)
        self.max_bytes = int(max_bytes)
        self.backup_count = int(backup_count)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def archive_dir(self) -> Path:
        return self._path.parent / "archive"

    def rolled_path(self, index: int) -> Path:
        if index == 0:
            return self._path
        return self._path.with_name(f"{self._path.stem}.{index}{self._path.suffix}")

    def write(self, record: Mapping[str, Any] | None) -> None:
        data = (json.dumps(safe_dump(record), ensure_ascii=False) + "\n").encode("utf-8")
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if self._needs_roll(len(data)):
                self._roll()
            with self._path.open("ab") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())

    def read(self) -> List[Dict[str, Any]]:
        """Records in the live file, oldest first."""
        with self._lock:
            return list(iter_jsonl(self._path))

    def _needs_roll(self, incoming: int) -> bool:
        if self.max_bytes <= 0 or self.backup_count <= 0:
            return False
        try:
            size = self._path.stat().st_size
        except FileNotFoundError:
            return False
        return size > 0 and size + incoming > self.max_bytes

    def _roll(self) -> None:
        last = self.rolled_path(self.backup_count)
        if last.exists():
            self._archive(last)
        for index in range(self.backup_count - 1, -1, -1):
            src = self.rolled_path(index)
            if src.exists():
                os.replace(src, self.rolled_path(index + 1))

    def _archive(self, path: Path) -> Path:
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        stamp = _dt.datetime.now(tz=_dt.timezone.utc).strftime("%Y%m%dT%H%M%S%f")
        target = self.archive_dir / f"{path.name}.{stamp}.gz"
        with path.open("rb") as src, gzip.open(target, "wb") as dst:
            shutil.copyfileobj(src, dst)
        path.unlink()
        return target


def get_logger(path: str | Path, max_bytes: int = 10_000_000, backup_count: int = 5) -> JsonlLogger:
    """Journal at `path`; relative paths resolve against the repo root."""
    target = Path(path)
    if not target.is_absolute():
        target = REPO_ROOT / target
    return JsonlLogger(target, max_bytes=max_bytes, backup_count=backup_count)


def log_event(logger: JsonlLogger, event_type: str, payload: Mapping[str, Any] | None) -> None:
    event = safe_dump(payload)
    event.setdefault("ts", _dt.datetime.now(tz=_dt.timezone.utc).isoformat())
    event["event_type"] = event_type
    event["pid"] = os.getpid()
    event["hostname"] = _HOSTNAME
    logger.write(event)


def iter_jsonl(path: Path) -> Iterator[Dict[str, Any]]:
    """Yield records from a plain or gzipped JSONL file; a missing file yields nothing."""
    path = Path(path)
    if not path.exists():
        return
    opener = gzip.open if path.suffix == ".gz" else open
    with opener(path, "rt", encoding="utf-8") as handle:
        for line in handle:
            if line.strip():
                yield json.loads(line)


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        value = value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (_dt.datetime, _dt.date)):
        return value.isoformat()
    if callable(value):
        return getattr(value, "__qualname__", repr(value))
    return repr(value)


def safe_dump(obj: Any) -> MutableMapping[str, Any]:
    """JSON-ready dict for any record; scalars are wrapped as {"value": ...}."""
    if obj is None:
        return {}
    out = _jsonable(obj)
    return out if isinstance(out, dict) else {"value": out}


__all__ = ["JsonlLogger", "get_logger", "log_event", "iter_jsonl", "safe_dump"]
