"""Constant product quote math.

Pure functions over reserves; nothing here mutates pool or ledger state.

The pool keeps x * y = k. For a swap of ``amount_in`` into reserve x:

    x' = x + amount_in
    y' = k // x'
    amount_out = y - y'

and for a requested ``amount_out`` of reserve y:

    y' = y - amount_out
    x' = k // y'
    amount_in = x' - x

There is no fee. Every division truncates.
"""

from __future__ import annotations

import structlog

from exchange.errors import (
    BelowContributionThreshold,
    InsufficientPoolBalance,
    ShareExceedsTotal,
    UnequalProportion,
)
from exchange.pool import PoolState
from exchange.safe_int import S

logger = structlog.get_logger()


def equivalent_amount(amount: int, reserve_from: int, reserve_to: int) -> int:
    """Amount of the other token needed to deposit alongside ``amount``.

    Formula: reserve_to * amount / reserve_from

    Args:
        amount: Amount of the known token
        reserve_from: Pool reserve of the known token
        reserve_to: Pool reserve of the token being estimated

    Returns:
        Required amount of the other token, truncated
    """
    return S(reserve_to).mul_div(amount, reserve_from).value


def share_for_deposit(pool: PoolState, amount1: int, amount2: int, genesis_share: int) -> int:
    """Shares issued for depositing (amount1, amount2).

    An empty pool issues ``genesis_share`` whatever the ratio; that ratio
    becomes the opening price. Otherwise each side is priced independently
    against the reserves and both must truncate to the same share count.

    Raises:
        UnequalProportion: If the two sides imply different share counts
        BelowContributionThreshold: If the deposit is worth zero shares
    """
    if pool.total_shares == 0:
        share = genesis_share
    else:
        share1 = S(pool.total_shares).mul_div(amount1, pool.total_token1)
        share2 = S(pool.total_shares).mul_div(amount2, pool.total_token2)
        if share1 != share2:
            raise UnequalProportion()
        share = share1.value

    if share == 0:
        raise BelowContributionThreshold()
    return share


def withdraw_amounts(pool: PoolState, share: int) -> tuple[int, int]:
    """Token amounts released by burning ``share``.

    Formula: amount_i = share * total_token_i / total_shares

    Raises:
        ShareExceedsTotal: If share is larger than the shares in existence
    """
    if share > pool.total_shares:
        raise ShareExceedsTotal()
    amount1 = S(share).mul_div(pool.total_token1, pool.total_shares)
    amount2 = S(share).mul_div(pool.total_token2, pool.total_shares)
    return amount1.value, amount2.value


def swap_amount_out(amount_in: int, reserve_in: int, reserve_out: int, k: int) -> int:
    """Output for an exact input swap.

    The output reserve is never fully drained: if the curve would hand out
    the whole reserve, one unit is held back so the next price quote still
    has a non-zero denominator.

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        k: Pool invariant constant

    Returns:
        Output token amount
    """
    reserve_in_after = S(reserve_in) + S(amount_in)
    reserve_out_after = S(k) // reserve_in_after
    amount_out = S(reserve_out) - reserve_out_after

    if amount_out == reserve_out:
        logger.debug(
            "depletion_guard_applied",
            amount_in=amount_in,
            reserve_out=reserve_out,
        )
        amount_out = amount_out - 1
    return amount_out.value


def swap_amount_in(amount_out: int, reserve_in: int, reserve_out: int, k: int) -> int:
    """Input required for an exact output swap.

    Args:
        amount_out: Desired output token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        k: Pool invariant constant

    Returns:
        Required input token amount

    Raises:
        InsufficientPoolBalance: If amount_out is the whole reserve or more
    """
    if amount_out >= reserve_out:
        raise InsufficientPoolBalance()
    reserve_out_after = S(reserve_out) - S(amount_out)
    reserve_in_after = S(k) // reserve_out_after
    return (reserve_in_after - S(reserve_in)).value


__all__ = [
    "equivalent_amount",
    "share_for_deposit",
    "swap_amount_in",
    "swap_amount_out",
    "withdraw_amounts",
]
