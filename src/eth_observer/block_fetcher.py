#!/usr/bin/env python3
"""Block fetching for the Ethereum observer.

This module wraps the two JSON-RPC calls the observer needs, reading the
chain head and reading a full block, and turns their results into typed
values.
"""

import logging
from typing import Any

from .errors import DecodeError, MalformedBlockNumberError
from .models import Transaction
from .utils.hex_utility import parse_block_number
from .utils.rpc_client import RpcTransport

# Get logger for this module
logger = logging.getLogger(__name__)


class BlockFetcher:
    """Reads the chain head and block contents through an RpcTransport."""

    BLOCK_NUMBER_METHOD = "eth_blockNumber"
    GET_BLOCK_METHOD = "eth_getBlockByNumber"

    def __init__(self, rpc: RpcTransport) -> None:
        """Initialize the BlockFetcher.

        Args:
            rpc: Transport used to reach the node
        """
        self.rpc = rpc

    async def get_current_block_number(self) -> str:
        """Return the current chain head as a hex string.

        Returns:
            Block number such as ``0x1b4``

        Raises:
            MalformedBlockNumberError: If the node returns something other than a hex quantity
            ObserverError: For any transport or RPC failure
        """
        result: Any = await self.rpc.send(self.BLOCK_NUMBER_METHOD)
        if not isinstance(result, str):
            raise MalformedBlockNumberError(f"invalid block number: {result!r}")
        # Validate only, the hex string is what callers get back
        parse_block_number(result)
        return result

    async def get_block_by_number(self, block_number: str) -> list[Transaction]:
        """Return the transactions of a block.

        Args:
            block_number: Block number as a hex string

        Returns:
            Transactions in block order

        Raises:
            DecodeError: If the block payload is missing or malformed
            ObserverError: For any transport or RPC failure
        """
        result: Any = await self.rpc.send(self.GET_BLOCK_METHOD, [block_number, True])

        if result is None:
            raise DecodeError(f"Block {block_number} not available")
        if not isinstance(result, dict):
            raise DecodeError(f"Block {block_number} must be a JSON object, got {type(result).__name__}")

        raw_transactions: Any = result.get("transactions", [])
        if not isinstance(raw_transactions, list):
            raise DecodeError(f"Block {block_number} transactions must be a list")

        transactions = [Transaction.from_dict(tx) for tx in raw_transactions]
        logger.debug(f"Fetched block {block_number} with {len(transactions)} transactions")
        return transactions
