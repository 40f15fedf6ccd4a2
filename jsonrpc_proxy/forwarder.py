"""Async HTTP forwarder for delivering JSON-RPC payloads to upstream endpoints."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from jsonrpc_proxy.core.errors import ForwardError

logger = logging.getLogger(__name__)

# Always sent upstream, whatever the inbound request carried
FORWARD_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


@dataclass
class UpstreamResponse:
    """Raw response from an upstream endpoint.

    Attributes:
        status_code: HTTP status returned by the upstream.
        headers: Response headers in received order, repeats preserved.
        body: Response body (already de-chunked and decompressed by httpx).
    """

    status_code: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""


class Forwarder:
    """POSTs JSON payloads to upstream endpoints over one shared httpx client.

    Usage:
        async with Forwarder(timeout=30.0) as forwarder:
            response = await forwarder.forward("https://rpc.example.org", body)
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the forwarder.

        Args:
            timeout: Request timeout in seconds.
            verify_ssl: Verify upstream TLS certificates.
            transport: Optional httpx transport (tests pass an httpx.MockTransport).
        """
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        logger.debug("Forwarder initialized: timeout=%s, verify_ssl=%s", timeout, verify_ssl)

    async def __aenter__(self) -> "Forwarder":
        """Enter async context, create httpx client."""
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            verify=self._verify_ssl,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context, close httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def forward(self, url: str, payload: bytes) -> UpstreamResponse:
        """Send payload to url as an HTTP POST and return the raw response.

        No retries are attempted.

        Args:
            url: Destination endpoint.
            payload: JSON body to send, unchanged.

        Returns:
            The upstream status, headers and body.

        Raises:
            ForwardError: On connection error, timeout, protocol error or invalid URL.
        """
        if self._client is None:
            raise ForwardError(url, "Forwarder not initialized. Use 'async with' context manager.")

        try:
            response = await self._client.post(url, content=payload, headers=FORWARD_HEADERS)
        except httpx.TimeoutException as e:
            logger.warning("Upstream request timed out: url=%s, timeout=%s", url, self._timeout)
            raise ForwardError(url, f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("Upstream request failed to %s: %s", url, e)
            raise ForwardError(url, f"{type(e).__name__}: {e}") from e
        except httpx.InvalidURL as e:
            raise ForwardError(url, f"Invalid URL: {e}") from e

        return UpstreamResponse(
            status_code=response.status_code,
            headers=list(response.headers.multi_items()),
            body=response.content,
        )
