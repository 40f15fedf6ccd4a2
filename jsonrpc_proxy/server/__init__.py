"""HTTP front end for the proxy."""

from jsonrpc_proxy.server.http import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    HEALTH_PATH,
    MAX_BODY_SIZE,
    HttpParseError,
    HttpRequest,
    handle_connection,
    read_http_body,
    read_http_request,
    read_http_request_headers,
    route_request,
    run_http_server,
    send_http_response,
    start_http_server,
)

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "HEALTH_PATH",
    "MAX_BODY_SIZE",
    "HttpParseError",
    "HttpRequest",
    "handle_connection",
    "read_http_body",
    "read_http_request",
    "read_http_request_headers",
    "route_request",
    "run_http_server",
    "send_http_response",
    "start_http_server",
]
