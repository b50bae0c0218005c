import itertools
import json
import logging
from typing import Any, Protocol, Sequence

import httpx

from ..errors import IdMismatchError, RpcError, TransportError
from ..models import JsonRpcRequest

logger = logging.getLogger(__name__)


class RpcTransport(Protocol):
    """Anything that can send a JSON-RPC request and return its ``result``."""

    async def send(self, method: str, params: Sequence[Any] = ()) -> Any:
        ...


class HttpRpcClient:
    """JSON-RPC client for an Ethereum node reachable over HTTP(S).

    Validates every response before handing back its ``result``: a node
    reported ``error`` raises RpcError and a response whose id does not
    match the request raises IdMismatchError. Network and decoding
    failures raise TransportError.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        """Initialize the RPC client.

        Args:
            rpc_url: HTTP(S) endpoint of the node
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the node in tests)
        """
        self.rpc_url: str = rpc_url
        self.timeout: float = timeout
        self._client: httpx.AsyncClient = httpx.AsyncClient(transport=transport, timeout=timeout)
        self._ids = itertools.count()

    async def __aenter__(self) -> "HttpRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def send(self, method: str, params: Sequence[Any] = ()) -> Any:
        """Send a JSON-RPC request and return the raw ``result`` member.

        Args:
            method: RPC method name
            params: Positional parameters

        Returns:
            The decoded ``result`` member of the response

        Raises:
            TransportError: If the request fails or the body is not a JSON object
            RpcError: If the response carries an ``error`` member
            IdMismatchError: If the response id differs from the request id
        """
        request = JsonRpcRequest(method=method, params=tuple(params), id=next(self._ids))
        payload: dict[str, Any] = request.to_dict()
        logger.debug(f"Posting to {self.rpc_url}: {json.dumps(payload)}")

        try:
            response: httpx.Response = await self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body: Any = response.json()
        except httpx.HTTPError as e:
            raise TransportError(f"{method} request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"{method} response is not valid JSON: {e}") from e

        if not isinstance(body, dict):
            raise TransportError(f"{method} response must be a JSON object, got {type(body).__name__}")

        # error member is checked before the id
        match body.get("error"):
            case None:
                pass
            case {"code": code} as error:
                raise RpcError(code, error.get("message", ""))
            case error:
                raise RpcError(0, str(error))

        if body.get("id") != request.id:
            raise IdMismatchError(request.id, body.get("id"))

        return body.get("result")
