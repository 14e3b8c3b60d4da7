"""
Fee Table

Ordered (recipient, basis points) entries applied to positive reward events.
Fees settle as newly minted shares; the table never redeems principal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from vault.errors import InvalidFee

LOG = logging.getLogger("vault.fees")

BASIS_POINTS = 10_000

MintHook = Callable[[str, int], None]


class RecipientKind(str, Enum):
    PLAIN = "plain"
    NOTIFY_ON_MINT = "notify_on_mint"


@dataclass(frozen=True)
class FeeRecipient:
    """Account receiving fee shares; notify-on-mint recipients get a hook call per mint."""
    account: str
    kind: RecipientKind = RecipientKind.PLAIN
    on_mint: Optional[MintHook] = None

    def __post_init__(self) -> None:
        if self.kind is RecipientKind.NOTIFY_ON_MINT and self.on_mint is None:
            raise ValueError(f"recipient {self.account} is notify-on-mint but has no hook")

    def notify(self, shares: int) -> None:
        if self.kind is RecipientKind.NOTIFY_ON_MINT and self.on_mint is not None:
            self.on_mint(self.account, shares)


@dataclass(frozen=True)
class FeeEntry:
    recipient: FeeRecipient
    basis_points: int

    def amount_for(self, reward: int) -> int:
        """Fee in underlying units for a positive reward, rounded down."""
        if reward <= 0:
            return 0
        return reward * self.basis_points // BASIS_POINTS


def as_recipient(recipient: FeeRecipient | str) -> FeeRecipient:
    if isinstance(recipient, FeeRecipient):
        return recipient
    return FeeRecipient(account=str(recipient))


class FeeTable:
    """Ordered fee entries whose total stays strictly below 100%."""

    def __init__(self, entries: Optional[List[FeeEntry]] = None) -> None:
        self._entries: List[FeeEntry] = []
        for entry in entries or []:
            self.add(entry.recipient, entry.basis_points)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    @property
    def total_basis_points(self) -> int:
        return sum(entry.basis_points for entry in self._entries)

    def entries(self) -> List[FeeEntry]:
        return list(self._entries)

    def _check_total(self, total: int) -> None:
        if total >= BASIS_POINTS:
            raise InvalidFee(f"fee total {total} bps must stay below {BASIS_POINTS}")

    def add(self, recipient: FeeRecipient | str, basis_points: int) -> FeeEntry:
        bps = _validate_bps(basis_points)
        self._check_total(self.total_basis_points + bps)
        entry = FeeEntry(recipient=as_recipient(recipient), basis_points=bps)
        self._entries.append(entry)
        LOG.info("[fees] add recipient=%s bps=%d total=%d", entry.recipient.account, bps, self.total_basis_points)
        return entry

    def update(self, index: int, recipient: FeeRecipient | str, basis_points: int) -> None:
        """Replace the entry at index; zero basis points removes it."""
        if index < 0 or index >= len(self._entries):
            raise InvalidFee(f"fee index {index} out of range")
        bps = _validate_bps(basis_points)
        if bps == 0:
            removed = self._entries.pop(index)
            LOG.info("[fees] remove recipient=%s", removed.recipient.account)
            return
        others = self.total_basis_points - self._entries[index].basis_points
        self._check_total(others + bps)
        self._entries[index] = FeeEntry(recipient=as_recipient(recipient), basis_points=bps)
        LOG.info("[fees] update index=%d recipient=%s bps=%d", index, self._entries[index].recipient.account, bps)

    def split(self, reward: int) -> List[Tuple[FeeRecipient, int]]:
        """Underlying fee amount per entry for a reward; empty for non-positive reward."""
        if reward <= 0:
            return []
        return [(entry.recipient, entry.amount_for(reward)) for entry in self._entries]


def _validate_bps(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFee(f"basis points must be an integer, got {value!r}")
    if value < 0 or value >= BASIS_POINTS:
        raise InvalidFee(f"basis points out of range: {value}")
    return value


__all__ = [
    "BASIS_POINTS",
    "RecipientKind",
    "FeeRecipient",
    "FeeEntry",
    "FeeTable",
    "as_recipient",
]
