"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from exchange.constants import GENESIS_SHARE, PRECISION


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for the exchange engine.

    Attributes:
        precision: Fixed-point scale shared by every amount (default: 1e6)
        genesis_share: Shares minted by the first provide on an empty pool
            (default: 100 * precision)
    """

    precision: int = PRECISION
    genesis_share: int = GENESIS_SHARE

    def __post_init__(self) -> None:
        if self.precision <= 0:
            raise ValueError(f"precision must be positive: {self.precision}")
        if self.genesis_share <= 0:
            raise ValueError(f"genesis_share must be positive: {self.genesis_share}")

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from environment variables.

        - AMM_GENESIS_SHARE: scaled share count for the genesis provide
        """
        genesis_share = os.environ.get("AMM_GENESIS_SHARE")
        if genesis_share is None:
            return cls()
        return cls(genesis_share=int(genesis_share))


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
