"""API endpoints for the exchange.

Every caller-attributed route reads the caller identity from the
``X-Account`` header. Identity attestation belongs to whatever sits in
front of this service.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query

from exchange.constants import UINT256_MAX
from exchange.engine import Exchange, get_default_exchange
from exchange.models import (
    EstimateResponse,
    HoldingsResponse,
    PoolDetailsResponse,
    ShareResponse,
    SwapRequest,
    TokenAmountsResponse,
    TokenPairRequest,
    WithdrawRequest,
)

router = APIRouter()


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange

    Returns:
        The exchange instance to operate on.
    """
    return get_default_exchange()


ExchangeDep = Annotated[Exchange, Depends(get_exchange)]
AccountHeader = Annotated[str, Header(alias="X-Account", min_length=1)]
QueryAmount = Annotated[int, Query(ge=0, le=UINT256_MAX)]


@router.post("/faucet", status_code=204)
def faucet(body: TokenPairRequest, account: AccountHeader, exchange: ExchangeDep) -> None:
    """Credit the caller's custodial balances."""
    exchange.faucet(account, body.amount_token1, body.amount_token2)


@router.get("/holdings")
def get_my_holdings(account: AccountHeader, exchange: ExchangeDep) -> HoldingsResponse:
    return HoldingsResponse.from_holdings(exchange.get_my_holdings(account))


@router.get("/pool")
def get_pool_details(exchange: ExchangeDep) -> PoolDetailsResponse:
    return PoolDetailsResponse.from_details(exchange.get_pool_details())


@router.get("/estimate/equivalent/token1")
def get_equivalent_token1_estimate(
    exchange: ExchangeDep, amount_token2: QueryAmount
) -> EstimateResponse:
    """Token1 to deposit alongside ``amount_token2``."""
    return EstimateResponse(amount=exchange.get_equivalent_token1_estimate(amount_token2))


@router.get("/estimate/equivalent/token2")
def get_equivalent_token2_estimate(
    exchange: ExchangeDep, amount_token1: QueryAmount
) -> EstimateResponse:
    """Token2 to deposit alongside ``amount_token1``."""
    return EstimateResponse(amount=exchange.get_equivalent_token2_estimate(amount_token1))


@router.post("/provide")
def provide(body: TokenPairRequest, account: AccountHeader, exchange: ExchangeDep) -> ShareResponse:
    share = exchange.provide(account, body.amount_token1, body.amount_token2)
    return ShareResponse(share=share)


@router.get("/estimate/withdraw")
def get_withdraw_estimate(
    exchange: ExchangeDep, share: QueryAmount
) -> TokenAmountsResponse:
    amount_token1, amount_token2 = exchange.get_withdraw_estimate(share)
    return TokenAmountsResponse(amount_token1=amount_token1, amount_token2=amount_token2)


@router.post("/withdraw")
def withdraw(
    body: WithdrawRequest, account: AccountHeader, exchange: ExchangeDep
) -> TokenAmountsResponse:
    amount_token1, amount_token2 = exchange.withdraw(account, body.share)
    return TokenAmountsResponse(amount_token1=amount_token1, amount_token2=amount_token2)


@router.get("/estimate/swap/token1")
def get_swap_token1_estimate(
    exchange: ExchangeDep, amount_token1: QueryAmount
) -> EstimateResponse:
    """Token2 received for selling ``amount_token1``."""
    return EstimateResponse(amount=exchange.get_swap_token1_estimate(amount_token1))


@router.get("/estimate/swap/token2")
def get_swap_token2_estimate(
    exchange: ExchangeDep, amount_token2: QueryAmount
) -> EstimateResponse:
    """Token1 received for selling ``amount_token2``."""
    return EstimateResponse(amount=exchange.get_swap_token2_estimate(amount_token2))


@router.get("/estimate/swap/token1/given-token2")
def get_swap_token1_estimate_given_token2(
    exchange: ExchangeDep, amount_token2: QueryAmount
) -> EstimateResponse:
    """Token1 needed to receive exactly ``amount_token2``."""
    return EstimateResponse(amount=exchange.get_swap_token1_estimate_given_token2(amount_token2))


@router.get("/estimate/swap/token2/given-token1")
def get_swap_token2_estimate_given_token1(
    exchange: ExchangeDep, amount_token1: QueryAmount
) -> EstimateResponse:
    """Token2 needed to receive exactly ``amount_token1``."""
    return EstimateResponse(amount=exchange.get_swap_token2_estimate_given_token1(amount_token1))


@router.post("/swap/token1")
def swap_token1(body: SwapRequest, account: AccountHeader, exchange: ExchangeDep) -> EstimateResponse:
    """Sell token1; responds with the token2 amount received."""
    return EstimateResponse(amount=exchange.swap_token1(account, body.amount))


@router.post("/swap/token2")
def swap_token2(body: SwapRequest, account: AccountHeader, exchange: ExchangeDep) -> EstimateResponse:
    """Sell token2; responds with the token1 amount received."""
    return EstimateResponse(amount=exchange.swap_token2(account, body.amount))
