"""Pytest configuration and fixtures."""

import pytest

from exchange.engine import Exchange
from tests.helpers import ALICE, BOB, make_exchange


@pytest.fixture
def exchange() -> Exchange:
    """Fresh exchange with an inactive pool and an empty ledger."""
    return Exchange()


@pytest.fixture
def funded_exchange() -> Exchange:
    """Inactive pool; ALICE and BOB each hold 1000.0 of both tokens."""
    return make_exchange(funded=[ALICE, BOB])


@pytest.fixture
def genesis_exchange() -> Exchange:
    """ALICE seeded the pool with (1.0, 2.0); BOB is funded but holds no shares.

    Pool: total_token1=1_000_000, total_token2=2_000_000,
    total_shares=100_000_000, k=2_000_000_000_000.
    """
    return make_exchange(funded=[ALICE, BOB], genesis=(ALICE, 1_000_000, 2_000_000))


@pytest.fixture
def deep_exchange(genesis_exchange: Exchange) -> Exchange:
    """Genesis pool after BOB provides (0.5, 1.0).

    Pool: total_token1=1_500_000, total_token2=3_000_000,
    total_shares=150_000_000, k=4_500_000_000_000.
    """
    genesis_exchange.provide(BOB, 500_000, 1_000_000)
    return genesis_exchange
