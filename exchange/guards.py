"""Preconditions checked before any state is touched.

Each guard either returns normally or raises the matching ExchangeError.
Operations call them at the top of their body, ahead of every quote and
mutation, so a failing guard leaves pool and ledger exactly as they were.
"""

from __future__ import annotations

from exchange.errors import InsufficientBalance, ZeroAmount, ZeroLiquidity
from exchange.pool import PoolState


def check_amount(amount: int, balance: int) -> None:
    """Require 0 < amount <= balance.

    Args:
        amount: Requested quantity
        balance: Caller's relevant token or share balance

    Raises:
        ZeroAmount: If amount is zero
        InsufficientBalance: If amount exceeds balance
        TypeError: If amount is not an integer
        ValueError: If amount is negative
    """
    _check_unsigned(amount)
    if amount == 0:
        raise ZeroAmount()
    if amount > balance:
        raise InsufficientBalance()


def check_active(pool: PoolState) -> None:
    """Require a pool with liquidity.

    Raises:
        ZeroLiquidity: If no shares are outstanding
    """
    if pool.total_shares == 0:
        raise ZeroLiquidity()


def check_quantity(amount: int) -> None:
    """Validate an estimate input, which may be zero."""
    _check_unsigned(amount)


def _check_unsigned(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"Amount must be int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
