"""Conversion between human decimal strings and scaled integer amounts.

Amounts travel through the engine as integers scaled by PRECISION. Callers
that accept user input (a form field, a CLI argument) convert with
parse_amount; anything rendering balances converts back with format_amount.
Both are exact: Decimal is used only for parsing, never floats.
"""

from __future__ import annotations

import decimal
import re
from decimal import Decimal

from exchange.constants import PRECISION, PRECISION_DECIMALS

# Digits, an optional point, at most PRECISION_DECIMALS fractional digits
AMOUNT_RE = re.compile(r"^[0-9]*[.]?[0-9]{0,%d}$" % PRECISION_DECIMALS)

# 78 digits of precision: enough for any uint256 value
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def parse_amount(text: str) -> int:
    """Parse a decimal string into a scaled integer amount.

    Args:
        text: Amount such as "1", "0.5" or ".25" (at most 6 decimals)

    Returns:
        The amount multiplied by PRECISION

    Raises:
        ValueError: If text is empty, a lone ".", or not a valid amount
    """
    text = text.strip()
    if text in ("", ".") or not AMOUNT_RE.match(text):
        raise ValueError(f"Amount should be a valid number: '{text}'")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        scaled = Decimal(text) * PRECISION
    return int(scaled)


def format_amount(amount: int) -> str:
    """Render a scaled integer amount as a decimal string.

    Trailing fractional zeros are dropped: 1_500_000 -> "1.5",
    2_000_000 -> "2".
    """
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
    whole, frac = divmod(amount, PRECISION)
    if frac == 0:
        return str(whole)
    digits = str(frac).rjust(PRECISION_DECIMALS, "0").rstrip("0")
    return f"{whole}.{digits}"


__all__ = [
    "AMOUNT_RE",
    "format_amount",
    "parse_amount",
]
