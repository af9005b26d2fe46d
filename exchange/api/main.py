"""FastAPI application hosting the exchange.

The host serializes nothing itself: the Exchange takes its own blocking lock
around every operation, so concurrent requests are safe as long as they
share the one instance returned by get_exchange. Exchange routes are plain
``def`` handlers, which FastAPI runs in its threadpool, so waiting on that
lock never blocks the event loop.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from exchange.api.endpoints import router
from exchange.errors import ExchangeError
from exchange.models import ErrorResponse
from exchange.safe_int import SafeIntError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Constant Product Exchange",
    description="Two-asset constant product pool with an internal balance ledger",
    version="0.1.0",
)


@app.exception_handler(ExchangeError)
async def exchange_error_handler(request: Request, exc: ExchangeError) -> JSONResponse:
    """Surface a rejected operation as 400 with its error code."""
    body = ErrorResponse(error=exc.code, detail=exc.message)
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    """Arithmetic outside uint256 range; state was rolled back."""
    logger.warning("arithmetic_error", path=request.url.path, error=str(exc))
    body = ErrorResponse(error="arithmetic_error", detail=str(exc))
    return JSONResponse(status_code=422, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the exchange API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 0.0.0.0)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable debug/reload mode (default: false)
    - AMM_GENESIS_SHARE: Shares minted by the genesis provide
    """
    uvicorn.run(
        "exchange.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
