"""Per-account balance ledger.

Tracks, for every account, the two custodial token balances held outside
the pool and the account's pool share balance. Accounts are created
implicitly on first credit and never removed.

Listeners subscribed to the ledger are told about every row change as it
happens. They run synchronously, in the middle of whichever operation made
the change, and may call back into the exchange.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from exchange.safe_int import S

logger = structlog.get_logger()

# Opaque caller identity supplied by the host runtime
Account = str


class Asset(str, Enum):
    """Ledger column."""

    TOKEN1 = "token1"
    TOKEN2 = "token2"
    SHARE = "share"


@dataclass(frozen=True)
class BalanceChange:
    """One ledger row change, delivered to listeners."""

    account: Account
    asset: Asset
    before: int
    after: int


@dataclass(frozen=True)
class Holdings:
    """An account's balances, in the shape getMyHoldings returns them."""

    amount_token1: int
    amount_token2: int
    my_share: int


BalanceListener = Callable[[BalanceChange], None]

# Snapshot type: (account, asset) -> amount
LedgerSnapshot = dict[tuple[Account, Asset], int]

# Undo entry: row key and its value before the write (None if the row was new)
JournalEntry = tuple[tuple[Account, Asset], int | None]


class BalanceLedger:
    """Balance table mapping (account, asset) -> amount.

    Debits and credits go through SafeInt, so a balance can never go
    negative or exceed uint256. Sufficiency is checked by the guard layer
    before the exchange debits; a debit that would underflow here is a bug
    in the caller and raises Underflow.
    """

    def __init__(self) -> None:
        self._balances: LedgerSnapshot = {}
        self._listeners: list[BalanceListener] = []
        self._journal: list[JournalEntry] | None = None

    def get(self, account: Account, asset: Asset) -> int:
        """Get balance for (account, asset). Returns 0 if not found."""
        return self._balances.get((account, asset), 0)

    def holdings(self, account: Account) -> Holdings:
        return Holdings(
            amount_token1=self.get(account, Asset.TOKEN1),
            amount_token2=self.get(account, Asset.TOKEN2),
            my_share=self.get(account, Asset.SHARE),
        )

    def credit(self, account: Account, amount1: int, amount2: int) -> None:
        """Increase both custodial token balances.

        Used by the faucet. Has no error conditions beyond range checks.
        """
        self.add(account, Asset.TOKEN1, amount1)
        self.add(account, Asset.TOKEN2, amount2)

    def add(self, account: Account, asset: Asset, amount: int) -> None:
        """Increase one balance by amount."""
        before = self.get(account, asset)
        self._write(account, asset, before, (S(before) + S(amount)).value)

    def subtract(self, account: Account, asset: Asset, amount: int) -> None:
        """Decrease one balance by amount.

        Raises:
            Underflow: If the balance is smaller than amount
        """
        before = self.get(account, asset)
        self._write(account, asset, before, (S(before) - S(amount)).value)

    def total_shares(self) -> int:
        """Sum of every account's share balance."""
        return sum(
            amount for (_, asset), amount in self._balances.items() if asset is Asset.SHARE
        )

    def accounts(self) -> set[Account]:
        """Accounts that have ever held a balance."""
        return {account for account, _ in self._balances}

    def subscribe(self, listener: BalanceListener) -> Callable[[], None]:
        """Register a listener for balance changes.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> LedgerSnapshot:
        """Copy of every row, for comparisons and diagnostics."""
        return dict(self._balances)

    # --- Undo journal ---

    def begin(self) -> None:
        """Start recording row changes so they can be undone.

        Raises:
            RuntimeError: If a journal is already open
        """
        if self._journal is not None:
            raise RuntimeError("Ledger journal already open")
        self._journal = []

    def commit(self) -> None:
        """Keep every change since begin() and close the journal."""
        self._journal = None

    def rollback(self) -> None:
        """Undo every change since begin(), newest first, and close the journal.

        Listeners are not notified.
        """
        journal, self._journal = self._journal or [], None
        for key, before in reversed(journal):
            if before is None:
                self._balances.pop(key, None)
            else:
                self._balances[key] = before

    def _write(self, account: Account, asset: Asset, before: int, after: int) -> None:
        key = (account, asset)
        if self._journal is not None:
            self._journal.append((key, self._balances.get(key)))
        # Rows are kept even at zero: an account exists once credited
        self._balances[key] = after
        if before == after:
            return
        change = BalanceChange(account=account, asset=asset, before=before, after=after)
        for listener in list(self._listeners):
            listener(change)
