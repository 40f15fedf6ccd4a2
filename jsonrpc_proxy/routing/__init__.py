"""Method-aware routing of JSON-RPC calls to upstream endpoints."""

from jsonrpc_proxy.routing.dispatcher import (
    Dispatcher,
    build_batch_body,
    group_by_destination,
    join_records,
)
from jsonrpc_proxy.routing.handler import (
    ProxyResponse,
    error_response,
    handle_proxy_request,
    health_response,
    relay_headers,
)
from jsonrpc_proxy.routing.table import RouteTable

__all__ = [
    "Dispatcher",
    "ProxyResponse",
    "RouteTable",
    "build_batch_body",
    "error_response",
    "group_by_destination",
    "handle_proxy_request",
    "health_response",
    "join_records",
    "relay_headers",
]
