"""Protocol constants for the exchange.

All quantities are integers scaled by PRECISION (6 decimal digits).
"""

# Fixed-point scale: 1.0 == 1_000_000
PRECISION = 1_000_000

# Number of decimal digits carried by PRECISION
PRECISION_DECIMALS = 6

# Shares issued to the very first provider, whatever ratio they deposit
GENESIS_SHARE = 100 * PRECISION

# Maximum uint256 value; every stored quantity must fit in 256 bits
UINT256_MAX = 2**256 - 1
