"""Ethereum JSON-RPC client utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from src.helpers.constants import DEFAULT_TIMEOUT, MAX_RETRIES, RETRY_BASE_DELAY
from src.helpers.http import retry_with_backoff
from src.helpers.rpc_models import EthGetBlockByNumberRequest, JsonRpcRequest


if TYPE_CHECKING:
    import httpx


class RPCClient:
    """Ethereum JSON-RPC client.

    Transport failures are retried with exponential backoff; JSON-RPC errors
    and `null` results are returned to the caller untouched.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = RETRY_BASE_DELAY,
    ) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds
            max_retries: Attempts per request on transport errors
            retry_base_delay: Initial backoff delay in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._next_id = 0

    def _request_id(self) -> int:
        self._next_id += 1
        return self._next_id

    async def _post(
        self, client: httpx.AsyncClient, payload: dict[str, Any], timeout: float
    ) -> dict[str, Any]:
        response = await client.post(self.rpc_url, json=payload, timeout=timeout)
        response.raise_for_status()
        return response.json()

    async def send(
        self,
        client: httpx.AsyncClient,
        request: JsonRpcRequest,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a prepared JSON-RPC request.

        Args:
            client: HTTP client instance
            request: Request model
            timeout: Optional timeout override

        Returns:
            RPC result value (None when the node returned null)

        Raises:
            httpx.HTTPError: If the HTTP request keeps failing after retries
            ValueError: If the RPC response contains an error
        """
        post = retry_with_backoff(
            max_retries=self.max_retries, base_delay=self.retry_base_delay
        )(self._post)
        result = await post(client, request.model_dump(), timeout or self.timeout)

        if "error" in result:
            msg = f"RPC error: {result['error']}"
            raise ValueError(msg)

        return result.get("result")

    async def get_block_by_number(
        self,
        client: httpx.AsyncClient,
        block_number: int,
        *,
        full_transactions: bool = False,
    ) -> dict[str, Any] | None:
        """Get a block by number.

        Args:
            client: HTTP client instance
            block_number: Block number
            full_transactions: Include full transaction objects

        Returns:
            Block JSON object, or None if the node does not have the block
        """
        request = EthGetBlockByNumberRequest(
            params=[hex(block_number), full_transactions], id=self._request_id()
        )
        return await self.send(client, request)


__all__ = ["RPCClient"]
