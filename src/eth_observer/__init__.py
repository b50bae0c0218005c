"""
Ethereum observer package.

Follows an Ethereum chain over JSON-RPC and records the transactions of
subscribed addresses.
"""

from .block_fetcher import BlockFetcher
from .config import ObserverConfig
from .memory_store import MemoryTransactionsStore, TransactionsStore
from .models import Transaction
from .observer import EthereumObserver

__all__ = [
    "BlockFetcher",
    "EthereumObserver",
    "MemoryTransactionsStore",
    "ObserverConfig",
    "Transaction",
    "TransactionsStore",
]
__version__ = "0.1.0"
