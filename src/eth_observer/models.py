#!/usr/bin/env python3
"""Data models for the Ethereum observer.

This module provides immutable data classes for the transactions pulled out
of blocks and for the JSON-RPC request envelope sent to the node.
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from .errors import DecodeError


@dataclass(frozen=True, slots=True)
class Transaction:
    """Represents a transaction as returned by ``eth_getBlockByNumber``.

    All scalar fields keep the node's hex encoding verbatim; nothing is
    parsed into numbers. Fields the node omits (or sends as ``null``, such as
    ``to`` for a contract creation) are stored as empty strings.

    Attributes:
        hash: Transaction hash
        from_address: Sender address (``from`` on the wire)
        to_address: Receiver address (``to`` on the wire)
        value: Transferred value in wei
        block_hash: Hash of the block containing the transaction
        block_number: Number of the block containing the transaction
        access_list: EIP-2930 access list entries
    """

    block_hash: str = ""
    block_number: str = ""
    from_address: str = ""
    gas: str = ""
    gas_price: str = ""
    max_fee_per_gas: str = ""
    max_priority_fee_per_gas: str = ""
    hash: str = ""
    input: str = ""
    nonce: str = ""
    to_address: str = ""
    transaction_index: str = ""
    value: str = ""
    type: str = ""
    access_list: tuple[Any, ...] = field(default_factory=tuple)
    chain_id: str = ""
    v: str = ""
    r: str = ""
    s: str = ""
    y_parity: str = ""

    # Attribute name -> JSON key used by the node
    WIRE_NAMES: ClassVar[dict[str, str]] = {
        "block_hash": "blockHash",
        "block_number": "blockNumber",
        "from_address": "from",
        "gas": "gas",
        "gas_price": "gasPrice",
        "max_fee_per_gas": "maxFeePerGas",
        "max_priority_fee_per_gas": "maxPriorityFeePerGas",
        "hash": "hash",
        "input": "input",
        "nonce": "nonce",
        "to_address": "to",
        "transaction_index": "transactionIndex",
        "value": "value",
        "type": "type",
        "access_list": "accessList",
        "chain_id": "chainId",
        "v": "v",
        "r": "r",
        "s": "s",
        "y_parity": "yParity",
    }

    # access_list entries are JSON objects
    __hash__ = None

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"Transaction(hash={self.hash[:10]}..., "
            f"from={self.from_address}, "
            f"to={self.to_address}, "
            f"value={self.value})"
        )

    @classmethod
    def from_dict(cls, payload: Any) -> "Transaction":
        """Decode a transaction object received from the node.

        Args:
            payload: One entry of a block's ``transactions`` list

        Returns:
            Transaction instance

        Raises:
            DecodeError: If the payload is not an object or a field has the wrong type
        """
        if not isinstance(payload, dict):
            raise DecodeError(f"Transaction must be a JSON object, got {type(payload).__name__}")

        values: dict[str, Any] = {}
        for attr, wire_name in cls.WIRE_NAMES.items():
            raw = payload.get(wire_name)
            if raw is None:
                continue
            if attr == "access_list":
                if not isinstance(raw, list):
                    raise DecodeError(f"Transaction field '{wire_name}' must be a list")
                values[attr] = tuple(raw)
            elif isinstance(raw, str):
                values[attr] = raw
            else:
                raise DecodeError(
                    f"Transaction field '{wire_name}' must be a string, got {type(raw).__name__}"
                )
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary using the node's JSON field names."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[self.WIRE_NAMES[f.name]] = list(value) if f.name == "access_list" else value
        return result


@dataclass(frozen=True, slots=True)
class JsonRpcRequest:
    """A JSON-RPC 2.0 request envelope.

    Attributes:
        method: RPC method name, e.g. ``eth_blockNumber``
        params: Positional parameters
        id: Correlation id echoed back by the node
    """

    method: str
    params: tuple[Any, ...] = ()
    id: int = 0

    JSONRPC_VERSION: ClassVar[str] = "2.0"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON body posted to the node."""
        return {
            "jsonrpc": self.JSONRPC_VERSION,
            "method": self.method,
            "params": list(self.params),
            "id": self.id,
        }
