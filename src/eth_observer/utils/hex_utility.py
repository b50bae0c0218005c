"""
Helpers for the hex-encoded quantities used on the JSON-RPC wire.
"""

import re

from ..errors import MalformedBlockNumberError

_BLOCK_NUMBER_PATTERN = re.compile(r"0x[0-9a-fA-F]+")


def format_block_number(block_number: int) -> str:
    """
    Format a block number as a JSON-RPC quantity.

    :param block_number: Non-negative block number
    :return: Lowercase hex string with a ``0x`` prefix, e.g. ``0x1b4``
    """
    if block_number < 0:
        raise ValueError(f"Block number must be non-negative, got {block_number}")
    return hex(block_number)


def parse_block_number(value: object) -> int:
    """
    Parse a JSON-RPC quantity into a block number.

    :param value: Value received from the node
    :return: The block number as an integer
    :raises MalformedBlockNumberError: If the value is not ``0x`` followed by hex digits
    """
    if not isinstance(value, str):
        raise MalformedBlockNumberError(f"invalid block number: {value!r}")
    if not value.startswith("0x"):
        raise MalformedBlockNumberError(f"invalid block number: {value!r} (missing 0x prefix)")
    if not _BLOCK_NUMBER_PATTERN.fullmatch(value):
        raise MalformedBlockNumberError(f"invalid block number: {value!r} (not hexadecimal)")
    return int(value[2:], 16)
