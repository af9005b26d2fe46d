"""Test helpers module for shared test utilities.

- constants: Account names and common amounts
- factories: Exchange factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    FAUCET_AMOUNT,
    ONE,
)
from tests.helpers.factories import make_exchange, state_of

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CAROL",
    "FAUCET_AMOUNT",
    "ONE",
    # Factories
    "make_exchange",
    "state_of",
]
