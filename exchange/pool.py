"""Shared pool state: reserves, issued shares and the invariant constant."""

from __future__ import annotations

from dataclasses import dataclass, replace

from exchange.ledger import Asset
from exchange.safe_int import S


@dataclass
class PoolDetails:
    """Pool totals, in the shape getPoolDetails returns them."""

    total_token1: int
    total_token2: int
    total_shares: int


@dataclass
class PoolState:
    """The single constant-product pool.

    Mutated only by the exchange engine. ``k`` is recomputed from the
    reserves after every provide and withdraw. Swaps move the reserves along
    the curve derived from ``k`` without recomputing it, so after swaps the
    realized product ``total_token1 * total_token2`` drifts from ``k`` by
    floor-division error (and by the unit held back when a swap would drain
    a reserve). That drift is expected.

    Attributes:
        total_token1: Reserve of token1 locked in the pool
        total_token2: Reserve of token2 locked in the pool
        total_shares: Shares issued across all accounts
        k: Invariant constant, the product of the reserves at the last
           provide or withdraw
    """

    total_token1: int = 0
    total_token2: int = 0
    total_shares: int = 0
    k: int = 0

    @property
    def is_active(self) -> bool:
        """True once liquidity has been provided and not fully withdrawn."""
        return self.total_shares > 0

    def reserve(self, asset: Asset) -> int:
        if asset is Asset.TOKEN1:
            return self.total_token1
        if asset is Asset.TOKEN2:
            return self.total_token2
        raise ValueError(f"Asset {asset} has no reserve")

    def get_reserves(self, asset_in: Asset) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if asset_in is Asset.TOKEN1:
            return self.total_token1, self.total_token2
        if asset_in is Asset.TOKEN2:
            return self.total_token2, self.total_token1
        raise ValueError(f"Asset {asset_in} has no reserve")

    def add_reserves(self, amount1: int, amount2: int) -> None:
        self.total_token1 = (S(self.total_token1) + S(amount1)).value
        self.total_token2 = (S(self.total_token2) + S(amount2)).value

    def remove_reserves(self, amount1: int, amount2: int) -> None:
        self.total_token1 = (S(self.total_token1) - S(amount1)).value
        self.total_token2 = (S(self.total_token2) - S(amount2)).value

    def recompute_k(self) -> None:
        self.k = (S(self.total_token1) * S(self.total_token2)).value

    def mint_shares(self, share: int) -> None:
        self.total_shares = (S(self.total_shares) + S(share)).value

    def burn_shares(self, share: int) -> None:
        self.total_shares = (S(self.total_shares) - S(share)).value

    def apply_swap(self, asset_in: Asset, amount_in: int, amount_out: int) -> None:
        """Move reserves along the curve. ``k`` is left as is."""
        if asset_in is Asset.TOKEN1:
            self.total_token1 = (S(self.total_token1) + S(amount_in)).value
            self.total_token2 = (S(self.total_token2) - S(amount_out)).value
        elif asset_in is Asset.TOKEN2:
            self.total_token2 = (S(self.total_token2) + S(amount_in)).value
            self.total_token1 = (S(self.total_token1) - S(amount_out)).value
        else:
            raise ValueError(f"Cannot swap {asset_in}")

    def details(self) -> PoolDetails:
        return PoolDetails(
            total_token1=self.total_token1,
            total_token2=self.total_token2,
            total_shares=self.total_shares,
        )

    def snapshot(self) -> PoolState:
        return replace(self)

    def restore(self, snapshot: PoolState) -> None:
        self.total_token1 = snapshot.total_token1
        self.total_token2 = snapshot.total_token2
        self.total_shares = snapshot.total_shares
        self.k = snapshot.k
