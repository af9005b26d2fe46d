"""Constant product exchange - two-asset AMM accounting engine."""

from exchange.engine import Exchange, get_default_exchange, reset_default_exchange

__version__ = "0.1.0"
__all__ = ["Exchange", "get_default_exchange", "reset_default_exchange", "__version__"]
