from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Mapping, MutableMapping, Optional

from vault.log_utils import JsonlLogger, get_logger, log_event, safe_dump

__all__ = ["now_utc", "validate_event", "EventRecorder"]


_LOG = logging.getLogger("vault.events")

_REQUIRED_FIELDS = {
    "vault_deposit": {"account", "amount", "shares", "placements", "buffered", "total_staked", "total_shares"},
    "vault_withdraw": {
        "account",
        "recipient",
        "amount",
        "shares",
        "from_buffer",
        "pulls",
        "total_staked",
        "total_shares",
    },
    "vault_rebase": {"strategies", "net_change", "fee_shares", "total_staked", "total_shares"},
    "vault_fee_mint": {"recipient", "amount", "shares", "source"},
    "vault_strategy_change": {"action", "strategies"},
    "vault_transfer": {"sender", "recipient", "shares"},
}


def now_utc() -> str:
    """Return current UTC timestamp as ISO8601 string."""
    return datetime.now(tz=timezone.utc).isoformat()


def validate_event(event_type: str, payload: Mapping[str, Any]) -> None:
    """Validate that required keys for an event are present."""
    required = _REQUIRED_FIELDS.get(event_type)
    if not required:
        return
    missing = [field for field in required if field not in payload]
    if missing:
        raise ValueError(f"{event_type} missing fields: {', '.join(sorted(missing))}")


class EventRecorder:
    """
    Observability sink for vault records.

    Keeps the most recent records in memory and, when given a JSONL
    logger, appends each record to disk. Write failures are logged and
    never propagate into the ledger operation that produced the record.
    """

    def __init__(self, logger: Optional[JsonlLogger] = None, keep: int = 1000) -> None:
        self._logger = logger
        self._records: Deque[Dict[str, Any]] = deque(maxlen=max(1, int(keep)))

    @classmethod
    def to_path(cls, path: str, max_bytes: int = 10_000_000, backup_count: int = 5) -> "EventRecorder":
        return cls(get_logger(path, max_bytes=max_bytes, backup_count=backup_count))

    @property
    def records(self) -> List[Dict[str, Any]]:
        return list(self._records)

    def of_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [rec for rec in self._records if rec.get("event_type") == event_type]

    def clear(self) -> None:
        self._records.clear()

    def write(self, event_type: str, payload: Mapping[str, Any]) -> None:
        body: MutableMapping[str, Any] = safe_dump(payload or {})
        try:
            validate_event(event_type, body)
        except ValueError as exc:
            _LOG.warning("skip_event invalid=%s error=%s payload=%s", event_type, exc, payload)
            return
        body["event_type"] = event_type
        body["ts"] = now_utc()
        self._records.append(dict(body))
        if self._logger is None:
            return
        try:
            log_event(self._logger, event_type, body)
        except OSError as exc:
            _LOG.warning("event_write_failed type=%s err=%s", event_type, exc)
