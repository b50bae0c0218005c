"""
In-memory transaction storage.

Provides the TransactionsStore protocol the observer writes into and a
thread-safe dictionary-backed implementation of it.
"""

import threading
from typing import Dict, List, Protocol, Sequence

from .models import Transaction


class TransactionsStore(Protocol):
    """Append-only storage of transactions keyed by address."""

    def add_transactions(self, address: str, transactions: Sequence[Transaction]) -> None:
        ...

    def get_transactions(self, address: str) -> List[Transaction]:
        ...


class MemoryTransactionsStore:
    """
    Keeps transactions per address in process memory.

    Nothing is persisted; the store starts empty on every run.
    """

    def __init__(self):
        self._transactions: Dict[str, List[Transaction]] = {}
        self._lock = threading.Lock()

    def add_transactions(self, address: str, transactions: Sequence[Transaction]) -> None:
        """
        Append transactions for an address after any already stored.

        Args:
            address: Address the transactions belong to
            transactions: Transactions to append, in order
        """
        with self._lock:
            self._transactions.setdefault(address, []).extend(transactions)

    def get_transactions(self, address: str) -> List[Transaction]:
        """
        Get the transactions stored for an address.

        Args:
            address: Address to look up

        Returns:
            Copy of the stored list, empty if the address is unknown
        """
        with self._lock:
            return list(self._transactions.get(address, ()))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(txs) for txs in self._transactions.values())
