"""
Ethereum chain observer.

This module contains the long-running service that follows the chain head,
reads every new block, and records the transactions touching subscribed
addresses in a TransactionsStore.
"""

import asyncio
import logging
from typing import Any, Optional

from .address_filter import collect_subscribed_addresses
from .block_fetcher import BlockFetcher
from .errors import ObserverError
from .memory_store import TransactionsStore
from .models import Transaction
from .utils.hex_utility import format_block_number, parse_block_number

logger = logging.getLogger(__name__)


class EthereumObserver:
    """
    Observes the chain and collects transactions for subscribed addresses.

    The latest processed block (the watermark), the set of blocks waiting to
    be read and the subscribed addresses are guarded by a single lock. Reads
    of the chain happen outside the lock.
    """

    DEFAULT_POLL_INTERVAL = 10.0  # seconds, average block time is ~13s

    def __init__(
        self,
        block_fetcher: BlockFetcher,
        transactions_store: TransactionsStore,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        retry_delay: float = 0.0
    ):
        """
        Initialize the observer.

        Args:
            block_fetcher: Source of chain head and block contents
            transactions_store: Where matched transactions are appended
            poll_interval: Seconds to wait when there is nothing left to read
            retry_delay: Seconds to wait before retrying a failed head read
        """
        self.block_fetcher = block_fetcher
        self.transactions_store = transactions_store
        self.poll_interval = poll_interval
        self.retry_delay = retry_delay

        self._lock = asyncio.Lock()
        self._latest_block = 0
        self._blocks_to_read: set[int] = set()
        self._subscribed_addresses: set[str] = set()

        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.running = False
        self._seeded = False

        # Metrics tracking
        self.blocks_processed = 0
        self.blocks_failed = 0

    async def subscribe(self, address: str) -> bool:
        """
        Add an address to the subscribed addresses.

        Addresses are stored lowercase since the input may carry an EIP-55
        checksum while the node returns transactions in lowercase.

        Args:
            address: Address to watch

        Returns:
            True if the address was newly added, False if already subscribed
        """
        canonical = address.lower()
        async with self._lock:
            if canonical in self._subscribed_addresses:
                logger.debug(f"Already subscribed to address {canonical}")
                return False
            self._subscribed_addresses.add(canonical)
        logger.debug(f"Subscribed to address {canonical}")
        return True

    async def current_block(self) -> int:
        """Return the latest processed block number."""
        async with self._lock:
            return self._latest_block

    async def pending_blocks(self) -> set[int]:
        """Return a snapshot of the block numbers waiting to be read."""
        async with self._lock:
            return set(self._blocks_to_read)

    async def subscriptions(self) -> set[str]:
        """Return a snapshot of the subscribed addresses."""
        async with self._lock:
            return set(self._subscribed_addresses)

    def get_transactions(self, address: str) -> list[Transaction]:
        """
        Return the transactions recorded for an address.

        Args:
            address: Address in any casing

        Returns:
            Recorded transactions, empty if there are none
        """
        return self.transactions_store.get_transactions(address.lower())

    async def _add_block_to_read(self, block_number: int) -> None:
        async with self._lock:
            self._blocks_to_read.add(block_number)

    async def _remove_block_to_read(self, block_number: int) -> None:
        async with self._lock:
            self._blocks_to_read.discard(block_number)

    async def _update_latest_block(self, block_number: int) -> bool:
        """
        Advance the watermark if block_number is beyond it.

        Returns:
            True if the watermark moved
        """
        async with self._lock:
            if block_number > self._latest_block:
                self._latest_block = block_number
                logger.info(f"Updated latest block to {block_number}")
                return True
            return False

    async def update_transactions(self, block_number: int) -> None:
        """
        Read a block and record the transactions of subscribed addresses.

        If the block cannot be read it goes back into the blocks to read and
        nothing is written to the store. Otherwise matched transactions are
        appended per address and the watermark advances to block_number
        when it is higher.

        Args:
            block_number: Block to process
        """
        logger.debug(f"Updating transactions for block {block_number}")

        try:
            transactions = await self.block_fetcher.get_block_by_number(
                format_block_number(block_number)
            )
        except ObserverError as e:
            logger.error(f"Error reading block {block_number}: {e}")
            self.blocks_failed += 1
            await self._add_block_to_read(block_number)
            return

        async with self._lock:
            subscriptions = frozenset(self._subscribed_addresses)

        transactions_by_address = collect_subscribed_addresses(transactions, subscriptions)
        for address, address_transactions in transactions_by_address.items():
            self.transactions_store.add_transactions(address, address_transactions)
        if transactions_by_address:
            logger.info(
                f"Block {block_number}: recorded transactions for "
                f"{len(transactions_by_address)} subscribed addresses"
            )

        self.blocks_processed += 1
        await self._update_latest_block(block_number)

    async def _wait(self, delay: float) -> None:
        """Sleep for delay seconds, returning early if stop() is called."""
        if delay <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass  # Delay elapsed

    async def _fetch_head(self) -> int:
        block_number = await self.block_fetcher.get_current_block_number()
        return parse_block_number(block_number)

    async def _seed(self) -> bool:
        """
        Set the watermark to the current chain head.

        Starting from the head avoids parsing from the genesis block. Retries
        until the head is read or the observer is stopped. Runs once per
        observer; a restart keeps the existing watermark so blocks produced
        while stopped are still queued.

        Returns:
            True once seeded, False if stopped first
        """
        if self._seeded:
            logger.info(f"Resuming from block {await self.current_block()}")
            return True
        while not self._stop_event.is_set():
            try:
                head = await self._fetch_head()
            except ObserverError as e:
                logger.error(f"Error seeding latest block: {e}")
                await self._wait(self.retry_delay)
                continue

            await self._update_latest_block(head)
            self._seeded = True
            logger.info(f"Seeded observer at block {head}")
            return True
        return False

    async def _poll_once(self) -> None:
        """Run one polling iteration: detect new blocks, then drain the backlog."""
        try:
            head = await self._fetch_head()
        except ObserverError as e:
            logger.error(f"Error reading chain head: {e}")
            await self._wait(self.retry_delay)
            return

        # Queue every block between the watermark and the head, head excluded
        async with self._lock:
            for block_number in range(self._latest_block + 1, head):
                self._blocks_to_read.add(block_number)
            batch = sorted(self._blocks_to_read)

        for block_number in batch:
            if self._stop_event.is_set():
                return
            # Remove before processing; a failed read adds it back
            await self._remove_block_to_read(block_number)
            await self.update_transactions(block_number)

        async with self._lock:
            backlog = len(self._blocks_to_read)

        if backlog == 0:
            await self._wait(self.poll_interval)
        else:
            logger.debug(f"{backlog} blocks left to read, polling again")
            # Yield so other tasks run between back-to-back iterations
            await asyncio.sleep(0)

    async def observe_chain(self) -> None:
        """
        Follow the chain until stop() is called.

        Seeds the watermark from the current head, then polls the head,
        queues every block produced since the watermark and reads them.
        Errors are logged and retried; none of them end the loop.
        """
        if self.running:
            logger.warning("Observer already running")
            return

        self.running = True
        logger.info("Starting chain observer...")

        try:
            if not await self._seed():
                return
            while not self._stop_event.is_set():
                await self._poll_once()
        except asyncio.CancelledError:
            logger.info("Chain observer cancelled")
            raise
        finally:
            self.running = False
            logger.info("Chain observer stopped")

    def start(self) -> asyncio.Task:
        """
        Launch observe_chain() as a background task.

        Returns:
            The running task; calling start() again while it runs returns the same task
        """
        if self._task is None or self._task.done():
            self._stop_event.clear()
            self._task = asyncio.create_task(self.observe_chain())
        return self._task

    def stop(self) -> None:
        """Ask the background loop to stop at its next suspension point."""
        logger.info("Stopping chain observer...")
        self._stop_event.set()

    async def shutdown(self) -> None:
        """Stop the observer and wait for the background task to finish."""
        self.stop()
        if self._task is not None:
            await self._task
            self._task = None

    async def get_status(self) -> dict[str, Any]:
        """
        Get current status of the observer.

        Returns:
            Dictionary with status information
        """
        async with self._lock:
            return {
                "is_running": self.running,
                "latest_block": self._latest_block,
                "blocks_to_read": len(self._blocks_to_read),
                "subscribed_addresses": len(self._subscribed_addresses),
                "blocks_processed": self.blocks_processed,
                "blocks_failed": self.blocks_failed,
            }
