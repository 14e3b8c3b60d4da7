"""Error taxonomy for vault operations.

Every error aborts the whole operation; the controller restores its
snapshot before the exception reaches the caller.
"""

from __future__ import annotations

__all__ = [
    "VaultError",
    "InvalidAmount",
    "InvalidFee",
    "InsufficientBalance",
    "InsufficientLiquidity",
    "InsufficientDepositRoom",
    "DepositsDisabled",
    "WithdrawalsDisabled",
    "AlreadyAdded",
    "InvalidOrder",
    "InvalidStrategySet",
    "StrategyNotEmpty",
]


class VaultError(Exception):
    """Base class for all vault failures."""


class InvalidAmount(VaultError):
    """Zero, negative or non-integer amount."""


class InvalidFee(InvalidAmount):
    """Fee table would reach or exceed 100%."""


class InsufficientBalance(VaultError):
    """Account holds fewer shares than the operation needs."""


class InsufficientLiquidity(VaultError):
    """Buffer plus drawable strategy deposits cannot cover a withdrawal."""


class InsufficientDepositRoom(VaultError):
    """Deposit exceeds what the buffer and strategies can accept."""


class DepositsDisabled(VaultError):
    pass


class WithdrawalsDisabled(VaultError):
    pass


class AlreadyAdded(VaultError):
    """Strategy is already in the vault's list."""


class InvalidOrder(VaultError):
    """Reorder list is not a permutation of the existing indices."""


class InvalidStrategySet(VaultError):
    """Empty, duplicate or unknown strategy indices."""


class StrategyNotEmpty(VaultError):
    """Strategy still holds deposits or unreconciled change."""
