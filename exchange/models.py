"""Pydantic models for the exchange HTTP API.

Field names on the wire follow the pool's public interface
(``amountToken1``, ``myShare``, ...). Snake_case names are accepted too.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from exchange.constants import UINT256_MAX
from exchange.ledger import Holdings
from exchange.pool import PoolDetails


def validate_amount(value: Any) -> int:
    """Validate a scaled integer amount.

    Args:
        value: JSON integer or decimal integer string

    Returns:
        The amount as int

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be an integer, got bool")

    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"Amount must be a decimal integer string: '{value}'") from err

    if not isinstance(value, int):
        raise ValueError(f"Amount must be int or string, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"Amount overflow: {value} > 2^256-1")
    return value


# Integer scaled by PRECISION, 0 <= amount <= 2^256-1
Amount = Annotated[
    int,
    BeforeValidator(validate_amount),
    Field(description="Integer amount scaled by PRECISION (1e6)"),
]

_CAMEL = ConfigDict(populate_by_name=True)


class TokenPairRequest(BaseModel):
    """Body for faucet and provide."""

    amount_token1: Amount = Field(alias="amountToken1")
    amount_token2: Amount = Field(alias="amountToken2")

    model_config = _CAMEL


class WithdrawRequest(BaseModel):
    share: Amount


class SwapRequest(BaseModel):
    amount: Amount = Field(description="Amount of the input token to sell")


class HoldingsResponse(BaseModel):
    amount_token1: int = Field(alias="amountToken1")
    amount_token2: int = Field(alias="amountToken2")
    my_share: int = Field(alias="myShare")

    model_config = _CAMEL

    @classmethod
    def from_holdings(cls, holdings: Holdings) -> "HoldingsResponse":
        return cls(
            amount_token1=holdings.amount_token1,
            amount_token2=holdings.amount_token2,
            my_share=holdings.my_share,
        )


class PoolDetailsResponse(BaseModel):
    total_token1: int = Field(alias="totalToken1")
    total_token2: int = Field(alias="totalToken2")
    total_shares: int = Field(alias="totalShares")

    model_config = _CAMEL

    @classmethod
    def from_details(cls, details: PoolDetails) -> "PoolDetailsResponse":
        return cls(
            total_token1=details.total_token1,
            total_token2=details.total_token2,
            total_shares=details.total_shares,
        )


class ShareResponse(BaseModel):
    share: int


class TokenAmountsResponse(BaseModel):
    """Withdraw result or estimate."""

    amount_token1: int = Field(alias="amountToken1")
    amount_token2: int = Field(alias="amountToken2")

    model_config = _CAMEL


class EstimateResponse(BaseModel):
    amount: int = Field(description="Estimated amount, scaled by PRECISION")


class ErrorResponse(BaseModel):
    """Body returned when an operation fails."""

    error: str = Field(description="Stable error code, e.g. 'zero_liquidity'")
    detail: str
