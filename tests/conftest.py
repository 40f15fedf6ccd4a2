"""Shared pytest fixtures and configuration for pytest."""

import json
from collections.abc import Callable
from typing import Any

import pytest

from jsonrpc_proxy.config.schema import RouteConfig
from jsonrpc_proxy.forwarder import UpstreamResponse
from jsonrpc_proxy.routing.table import RouteTable

DEFAULT_URL = "http://default.test/rpc"
CHAIN_URL = "http://chain.test/rpc"
BLOCK_URL = "http://block.test/rpc"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: test that runs a real server on a local socket"
    )


def echo_results(url: str, payload: bytes) -> Any:
    """Build what a well-behaved backend would return for a call or a batch.

    Each result names the backend and method that produced it.
    """
    def result(call: dict[str, Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": call.get("id"), "result": f"{url}#{call.get('method')}"}

    data = json.loads(payload)
    if isinstance(data, list):
        return [result(call) for call in data]
    return result(data)


class RecordingForwarder:
    """Stand-in forwarder that records every forward and answers from a table.

    Each destination can be mapped to an UpstreamResponse, an exception to
    raise, or a callable building the response from the payload. Unmapped
    destinations echo one result per call.
    """

    def __init__(
        self,
        responses: dict[
            str,
            UpstreamResponse | Exception | Callable[[str, bytes], UpstreamResponse],
        ] | None = None,
    ) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, bytes]] = []

    async def forward(self, url: str, payload: bytes) -> UpstreamResponse:
        self.calls.append((url, payload))
        answer = self.responses.get(url)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, UpstreamResponse):
            return answer
        if answer is not None:
            return answer(url, payload)
        return UpstreamResponse(
            status_code=200,
            headers=[("content-type", "application/json")],
            body=json.dumps(echo_results(url, payload)).encode("utf-8"),
        )

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


@pytest.fixture
def route_table() -> RouteTable:
    """Table with two explicit routes and a default."""
    return RouteTable.build(
        [
            RouteConfig(method="eth_chainId", url=CHAIN_URL),
            RouteConfig(method="eth_blockNumber", url=BLOCK_URL),
        ],
        DEFAULT_URL,
    )


@pytest.fixture
def make_forwarder() -> type[RecordingForwarder]:
    """The RecordingForwarder class, for tests that need canned responses."""
    return RecordingForwarder


@pytest.fixture
def forwarder() -> RecordingForwarder:
    """A RecordingForwarder where every destination echoes results."""
    return RecordingForwarder()
