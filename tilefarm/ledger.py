"""Coin ledger contract and the default in-memory implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol


class Ledger(Protocol):
    """Sole authority on the coin balance.

    Callers always check ``can_afford`` before ``spend`` and credit back with
    ``earn`` (under a distinct refund reason) when a later step fails.
    """

    @property
    def balance(self) -> int:
        ...

    def can_afford(self, amount: int) -> bool:
        ...

    def spend(self, amount: int, reason: str) -> bool:
        ...

    def earn(self, amount: int, reason: str) -> None:
        ...

    def reset(self, balance: int) -> None:
        """Replace the balance wholesale (new game, load)."""
        ...


@dataclass(frozen=True)
class LedgerEntry:
    amount: int  # signed: negative for spending
    reason: str
    balance_after: int


class CoinLedger:
    """Balance plus an append-only audit trail. Never goes negative."""

    def __init__(self, balance: int = 0):
        if balance < 0:
            raise ValueError("Starting balance cannot be negative")
        self._balance = int(balance)
        self.history: List[LedgerEntry] = []

    @property
    def balance(self) -> int:
        return self._balance

    def can_afford(self, amount: int) -> bool:
        return 0 <= amount <= self._balance

    def spend(self, amount: int, reason: str) -> bool:
        if amount < 0:
            raise ValueError("Cannot spend a negative amount")
        if not self.can_afford(amount):
            return False
        self._balance -= amount
        self.history.append(LedgerEntry(-amount, reason, self._balance))
        return True

    def earn(self, amount: int, reason: str) -> None:
        if amount < 0:
            raise ValueError("Cannot earn a negative amount")
        self._balance += amount
        self.history.append(LedgerEntry(amount, reason, self._balance))

    def reset(self, balance: int) -> None:
        """Replace the balance wholesale (new game / load). Clears history."""
        if balance < 0:
            raise ValueError("Balance cannot be negative")
        self._balance = int(balance)
        self.history.clear()
