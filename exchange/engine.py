"""Operation executor for the constant product exchange.

The Exchange owns the single PoolState and the BalanceLedger and is the
only code that mutates them. Each public operation follows the same shape:

1. Guards: validate amounts, balances and pool activity
2. Quote: compute amounts from the current reserves (pure)
3. Apply: mutate ledger and pool in a fixed order

Steps 1 and 2 cannot leave partial effects. Step 3 runs inside an atomic
region that restores the pool snapshot and replays the ledger journal
backwards if anything raises, so every operation is all-or-nothing.
Estimates and reads only take the lock.

Mutation order matters independently of locking. In provide, the caller's
token balances are debited before any share is credited, and in withdraw
the caller's shares are burned before any token is paid out. A ledger
listener that reads the exchange mid-operation therefore never sees value
it could spend twice. A listener that tries to mutate mid-operation is
refused outright.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from exchange import guards, quote
from exchange.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from exchange.errors import ExchangeError, OperationInProgress
from exchange.ledger import Account, Asset, BalanceLedger, Holdings
from exchange.pool import PoolDetails, PoolState

logger = structlog.get_logger()


class Exchange:
    """Two-asset constant product pool with an internal balance ledger.

    All amounts are integers scaled by ``config.precision``.

    Args:
        config: Engine configuration. Defaults to DEFAULT_ENGINE_CONFIG.
        pool: Pool state to operate on. A fresh, inactive pool if None.
        ledger: Balance ledger to operate on. A fresh ledger if None.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        pool: PoolState | None = None,
        ledger: BalanceLedger | None = None,
    ) -> None:
        self.config = config or DEFAULT_ENGINE_CONFIG
        self.pool = pool if pool is not None else PoolState()
        self.ledger = ledger if ledger is not None else BalanceLedger()
        # Re-entrant so a ledger listener on this thread can read state
        self._lock = threading.RLock()
        # Name of the mutating operation in flight, if any
        self._mutating: str | None = None

    @contextmanager
    def _atomic(self, operation: str, account: Account | None = None) -> Iterator[None]:
        """Run one mutating operation under the lock, all-or-nothing.

        Pool state is snapshotted and ledger writes are journaled; both are
        undone if the body raises. A second mutating operation started while
        this one is running (from a ledger listener on the same thread) is
        refused with OperationInProgress, since the outer operation has
        already quoted against the current reserves.
        """
        with self._lock:
            if self._mutating is not None:
                logger.warning(
                    "operation_rejected",
                    operation=operation,
                    account=account,
                    error=OperationInProgress.code,
                    running=self._mutating,
                )
                raise OperationInProgress()

            self._mutating = operation
            pool_snapshot = self.pool.snapshot()
            self.ledger.begin()
            try:
                yield
            except ExchangeError as err:
                self._rollback(pool_snapshot)
                logger.warning(
                    "operation_rejected",
                    operation=operation,
                    account=account,
                    error=err.code,
                    message=err.message,
                )
                raise
            except BaseException:
                self._rollback(pool_snapshot)
                raise
            else:
                self.ledger.commit()
            finally:
                self._mutating = None

    def _rollback(self, pool_snapshot: PoolState) -> None:
        self.pool.restore(pool_snapshot)
        self.ledger.rollback()

    # --- Ledger ---

    def faucet(self, account: Account, amount_token1: int, amount_token2: int) -> None:
        """Credit the caller's custodial balances."""
        with self._atomic("faucet", account):
            guards.check_quantity(amount_token1)
            guards.check_quantity(amount_token2)
            self.ledger.credit(account, amount_token1, amount_token2)

        logger.info(
            "faucet_credited",
            account=account,
            amount_token1=amount_token1,
            amount_token2=amount_token2,
        )

    def get_my_holdings(self, account: Account) -> Holdings:
        """Return (amount_token1, amount_token2, my_share) for the caller."""
        with self._lock:
            return self.ledger.holdings(account)

    def get_pool_details(self) -> PoolDetails:
        """Return (total_token1, total_token2, total_shares)."""
        with self._lock:
            return self.pool.details()

    # --- Provide ---

    def get_equivalent_token1_estimate(self, amount_token2: int) -> int:
        """Amount of token1 to deposit alongside ``amount_token2``."""
        with self._lock:
            guards.check_active(self.pool)
            guards.check_quantity(amount_token2)
            return quote.equivalent_amount(
                amount_token2, self.pool.total_token2, self.pool.total_token1
            )

    def get_equivalent_token2_estimate(self, amount_token1: int) -> int:
        """Amount of token2 to deposit alongside ``amount_token1``."""
        with self._lock:
            guards.check_active(self.pool)
            guards.check_quantity(amount_token1)
            return quote.equivalent_amount(
                amount_token1, self.pool.total_token1, self.pool.total_token2
            )

    def provide(self, account: Account, amount_token1: int, amount_token2: int) -> int:
        """Deposit both tokens into the pool and mint shares.

        The first provide on an empty pool mints ``config.genesis_share`` and
        fixes the opening price. Later provides must match the reserve ratio
        exactly after truncation.

        Returns:
            Shares issued to the caller

        Raises:
            ZeroAmount, InsufficientBalance: On an invalid amount
            UnequalProportion: If the amounts are off the reserve ratio
            BelowContributionThreshold: If the deposit is worth zero shares
        """
        with self._atomic("provide", account):
            guards.check_amount(amount_token1, self.ledger.get(account, Asset.TOKEN1))
            guards.check_amount(amount_token2, self.ledger.get(account, Asset.TOKEN2))

            genesis = not self.pool.is_active
            share = quote.share_for_deposit(
                self.pool, amount_token1, amount_token2, self.config.genesis_share
            )

            # Debit before credit: shares are minted last
            self.ledger.subtract(account, Asset.TOKEN1, amount_token1)
            self.ledger.subtract(account, Asset.TOKEN2, amount_token2)
            self.pool.add_reserves(amount_token1, amount_token2)
            self.pool.recompute_k()
            self.pool.mint_shares(share)
            self.ledger.add(account, Asset.SHARE, share)

        if genesis:
            logger.info(
                "pool_genesis",
                account=account,
                amount_token1=amount_token1,
                amount_token2=amount_token2,
                share=share,
            )
        logger.info(
            "liquidity_provided",
            account=account,
            amount_token1=amount_token1,
            amount_token2=amount_token2,
            share=share,
            total_shares=self.pool.total_shares,
        )
        return share

    # --- Withdraw ---

    def get_withdraw_estimate(self, share: int) -> tuple[int, int]:
        """Token amounts released by burning ``share``.

        Raises:
            ZeroLiquidity: If the pool is empty
            ShareExceedsTotal: If share exceeds the shares in existence
        """
        with self._lock:
            guards.check_active(self.pool)
            guards.check_quantity(share)
            return quote.withdraw_amounts(self.pool, share)

    def withdraw(self, account: Account, share: int) -> tuple[int, int]:
        """Burn shares and pay out the matching slice of both reserves.

        Returns:
            (amount_token1, amount_token2) credited to the caller
        """
        with self._atomic("withdraw", account):
            guards.check_active(self.pool)
            guards.check_amount(share, self.ledger.get(account, Asset.SHARE))

            amount_token1, amount_token2 = quote.withdraw_amounts(self.pool, share)

            # Burn before paying out
            self.ledger.subtract(account, Asset.SHARE, share)
            self.pool.burn_shares(share)
            self.pool.remove_reserves(amount_token1, amount_token2)
            self.pool.recompute_k()
            self.ledger.add(account, Asset.TOKEN1, amount_token1)
            self.ledger.add(account, Asset.TOKEN2, amount_token2)

        logger.info(
            "liquidity_withdrawn",
            account=account,
            share=share,
            amount_token1=amount_token1,
            amount_token2=amount_token2,
            total_shares=self.pool.total_shares,
        )
        return amount_token1, amount_token2

    # --- Swap ---

    def get_swap_token1_estimate(self, amount_token1: int) -> int:
        """Token2 received for selling ``amount_token1``."""
        return self._swap_estimate(Asset.TOKEN1, amount_token1)

    def get_swap_token2_estimate(self, amount_token2: int) -> int:
        """Token1 received for selling ``amount_token2``."""
        return self._swap_estimate(Asset.TOKEN2, amount_token2)

    def get_swap_token1_estimate_given_token2(self, amount_token2: int) -> int:
        """Token1 needed to receive exactly ``amount_token2``.

        Raises:
            InsufficientPoolBalance: If amount_token2 drains the token2 reserve
        """
        return self._swap_estimate_given_out(Asset.TOKEN1, amount_token2)

    def get_swap_token2_estimate_given_token1(self, amount_token1: int) -> int:
        """Token2 needed to receive exactly ``amount_token1``.

        Raises:
            InsufficientPoolBalance: If amount_token1 drains the token1 reserve
        """
        return self._swap_estimate_given_out(Asset.TOKEN2, amount_token1)

    def swap_token1(self, account: Account, amount_token1: int) -> int:
        """Sell token1 for token2. Returns the token2 amount received."""
        return self._swap(account, Asset.TOKEN1, amount_token1)

    def swap_token2(self, account: Account, amount_token2: int) -> int:
        """Sell token2 for token1. Returns the token1 amount received."""
        return self._swap(account, Asset.TOKEN2, amount_token2)

    def _swap_estimate(self, asset_in: Asset, amount_in: int) -> int:
        with self._lock:
            guards.check_active(self.pool)
            guards.check_quantity(amount_in)
            reserve_in, reserve_out = self.pool.get_reserves(asset_in)
            return quote.swap_amount_out(amount_in, reserve_in, reserve_out, self.pool.k)

    def _swap_estimate_given_out(self, asset_in: Asset, amount_out: int) -> int:
        with self._lock:
            guards.check_active(self.pool)
            guards.check_quantity(amount_out)
            reserve_in, reserve_out = self.pool.get_reserves(asset_in)
            return quote.swap_amount_in(amount_out, reserve_in, reserve_out, self.pool.k)

    def _swap(self, account: Account, asset_in: Asset, amount_in: int) -> int:
        asset_out = Asset.TOKEN2 if asset_in is Asset.TOKEN1 else Asset.TOKEN1

        with self._atomic(f"swap_{asset_in.value}", account):
            guards.check_active(self.pool)
            guards.check_amount(amount_in, self.ledger.get(account, asset_in))

            reserve_in, reserve_out = self.pool.get_reserves(asset_in)
            amount_out = quote.swap_amount_out(amount_in, reserve_in, reserve_out, self.pool.k)

            # k is deliberately not recomputed after a swap
            self.ledger.subtract(account, asset_in, amount_in)
            self.pool.apply_swap(asset_in, amount_in, amount_out)
            self.ledger.add(account, asset_out, amount_out)

        logger.info(
            "swap_executed",
            account=account,
            asset_in=asset_in.value,
            amount_in=amount_in,
            amount_out=amount_out,
            total_token1=self.pool.total_token1,
            total_token2=self.pool.total_token2,
        )
        return amount_out

    # --- Invariants ---

    def check_invariants(self) -> list[str]:
        """Check pool/ledger consistency.

        Returns:
            Human-readable violations; empty when the state is consistent.
            The realized product after swaps is not compared against k.
        """
        violations: list[str] = []
        with self._lock:
            pool = self.pool
            reserves_empty = pool.total_token1 == 0 and pool.total_token2 == 0
            if (pool.total_shares == 0) != reserves_empty:
                violations.append(
                    f"shares/reserves mismatch: shares={pool.total_shares} "
                    f"reserves=({pool.total_token1}, {pool.total_token2})"
                )
            ledger_shares = self.ledger.total_shares()
            if ledger_shares != pool.total_shares:
                violations.append(
                    f"share sum {ledger_shares} != total_shares {pool.total_shares}"
                )
        return violations


# Process-wide exchange instance (one owned pool)
_default_exchange: Exchange | None = None
_default_lock = threading.Lock()


def get_default_exchange() -> Exchange:
    """Get the process-wide exchange, creating it on first use."""
    global _default_exchange
    with _default_lock:
        if _default_exchange is None:
            _default_exchange = Exchange(config=EngineConfig.from_env())
        return _default_exchange


def reset_default_exchange(exchange: Exchange | None = None) -> Exchange:
    """Replace the process-wide exchange. Mainly for tests."""
    global _default_exchange
    with _default_lock:
        _default_exchange = exchange if exchange is not None else Exchange()
        return _default_exchange
