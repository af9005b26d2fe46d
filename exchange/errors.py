"""Exchange error classes.

Each error maps to one precondition the pool enforces. The ``code`` is a
stable identifier surfaced to callers; the message mirrors the revert
reason the pool has always reported.
"""


class ExchangeError(Exception):
    """Base error for exchange operations."""

    code: str = "exchange_error"
    default_message: str = "Exchange operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class ZeroAmount(ExchangeError):
    """A quantity argument is zero."""

    code = "zero_amount"
    default_message = "Amount cannot be zero!"


class InsufficientBalance(ExchangeError):
    """Caller's custodial or share balance is below the requested amount."""

    code = "insufficient_balance"
    default_message = "Insufficient amount"


class ZeroLiquidity(ExchangeError):
    """Pool is inactive; the operation needs reserves."""

    code = "zero_liquidity"
    default_message = "Zero Liquidity"


class UnequalProportion(ExchangeError):
    """Provide amounts do not match the current reserve ratio."""

    code = "unequal_proportion"
    default_message = "Equivalent value of tokens not provided..."


class BelowContributionThreshold(ExchangeError):
    """Share issuance for a deposit truncates to zero."""

    code = "below_contribution_threshold"
    default_message = "Asset value less than threshold for contribution!"


class ShareExceedsTotal(ExchangeError):
    """Withdraw asks for more shares than exist."""

    code = "share_exceeds_total"
    default_message = "Share should be less than totalShare"


class InsufficientPoolBalance(ExchangeError):
    """Swap-given-output asks for the whole output reserve or more."""

    code = "insufficient_pool_balance"
    default_message = "Insufficient pool balance"


class OperationInProgress(ExchangeError):
    """A mutating operation was started while another one is mid-flight.

    Only reachable from a ledger listener calling back into the exchange on
    the thread that holds the lock.
    """

    code = "operation_in_progress"
    default_message = "Another operation is in progress"
