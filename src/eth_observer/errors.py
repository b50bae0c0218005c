"""Error types raised at the RPC and block fetching boundary.

Every error here is retryable from the observer's point of view: the
background loop logs it and either polls again or re-enqueues the block
that failed.
"""


class ObserverError(Exception):
    """Base class for all errors the observer knows how to retry."""


class TransportError(ObserverError):
    """The request could not be delivered or the response body could not be decoded."""


class RpcError(ObserverError):
    """The node answered with a JSON-RPC ``error`` member.

    Attributes:
        code: JSON-RPC error code reported by the node
        message: Human-readable error message reported by the node
    """

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"error code: {code}, message: {message}")
        self.code = code
        self.message = message


class IdMismatchError(ObserverError):
    """The response id does not match the id of the request that produced it."""

    def __init__(self, expected: int, received: object) -> None:
        super().__init__(
            f"response ID does not match request ID (expected {expected}, got {received!r})"
        )
        self.expected = expected
        self.received = received


class MalformedBlockNumberError(ObserverError):
    """A block number is not a ``0x``-prefixed hexadecimal string."""


class DecodeError(ObserverError):
    """A JSON-RPC result does not have the shape the caller expects."""
