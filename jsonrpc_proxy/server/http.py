"""Pure asyncio HTTP server for the JSON-RPC proxy.

This module provides a minimal HTTP/1.1 server. Each connection carries one
request and is closed after the response (Connection: close).

Path-based routing:
    - any method  /health → fixed liveness response
    - POST        anything else → proxy handler (single call or batch)
    - other verbs anything else → 405

Example usage:
    table = RouteTable.from_config(config)
    async with Forwarder(timeout=30.0) as forwarder:
        await run_http_server(Dispatcher(table, forwarder), port=8080)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from http import HTTPStatus

from jsonrpc_proxy.core.errors import ProxyError
from jsonrpc_proxy.routing.dispatcher import Dispatcher
from jsonrpc_proxy.routing.handler import (
    ProxyResponse,
    error_response,
    handle_proxy_request,
    health_response,
)
from jsonrpc_proxy.rpc.protocol import INTERNAL_ERROR, INVALID_REQUEST, PARSE_ERROR

logger = logging.getLogger(__name__)

# Constants
DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"
MAX_BODY_SIZE = 10 * 1024 * 1024  # 10MB
HEALTH_PATH = "/health"
READ_TIMEOUT = 30.0

# HTTP header limits (DoS protection)
MAX_HEADERS_COUNT = 128  # Max number of headers
MAX_HEADER_NAME_LEN = 1024  # Max header name length (bytes)
MAX_HEADER_VALUE_LEN = 8192  # Max header value length (bytes)
MAX_TOTAL_HEADERS_SIZE = 32 * 1024  # 32KB total header size limit
MAX_REQUEST_LINE_LEN = 8192  # Max request line length


@dataclass
class HttpRequest:
    """Parsed HTTP request.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: Request path without query string (e.g., "/")
        headers: Dict of lowercase header names to values
        body: Request body as raw bytes
    """

    method: str
    path: str
    headers: dict[str, str]
    body: bytes


class HttpParseError(ProxyError):
    """Raised when HTTP request parsing fails."""


async def _readline(reader: asyncio.StreamReader, what: str) -> bytes:
    try:
        return await asyncio.wait_for(reader.readline(), timeout=READ_TIMEOUT)
    except TimeoutError:
        raise HttpParseError(f"{what} timeout") from None
    except ValueError as e:
        # StreamReader raises ValueError when a line exceeds its buffer limit
        raise HttpParseError(f"{what} too long") from e


async def read_http_request_headers(
    reader: asyncio.StreamReader,
) -> tuple[str, str, dict[str, str]]:
    """Read the request line and headers (not the body).

    Args:
        reader: The asyncio StreamReader to read from.

    Returns:
        Tuple of (method, path, headers). The path has its query string removed.

    Raises:
        HttpParseError: If the request line or headers are malformed or too large.
    """
    request_line = await _readline(reader, "Request")

    if not request_line:
        raise HttpParseError("Empty request")

    # Check request line length (DoS protection)
    if len(request_line) > MAX_REQUEST_LINE_LEN:
        raise HttpParseError(f"Request line too long: {len(request_line)} > {MAX_REQUEST_LINE_LEN}")

    # Parse request line: "POST / HTTP/1.1\r\n"
    try:
        request_line_str = request_line.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise HttpParseError(f"Invalid request encoding: {e}") from e

    parts = request_line_str.split(" ")
    if len(parts) != 3:
        raise HttpParseError(f"Invalid request line: {request_line_str}")
    method, target, _version = parts
    path = target.split("?", 1)[0] or "/"

    # Read headers (with DoS protection limits)
    headers: dict[str, str] = {}
    total_headers_size = 0

    while True:
        header_line = await _readline(reader, "Header read")

        if not header_line or header_line == b"\r\n" or header_line == b"\n":
            break  # End of headers

        # Track total headers size
        total_headers_size += len(header_line)
        if total_headers_size > MAX_TOTAL_HEADERS_SIZE:
            raise HttpParseError(
                f"Total headers size exceeds limit: {total_headers_size} > {MAX_TOTAL_HEADERS_SIZE}"
            )

        try:
            header_str = header_line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise HttpParseError(f"Invalid header encoding: {e}") from e

        if ":" not in header_str:
            continue  # Skip malformed headers

        name, value = header_str.split(":", 1)
        name = name.strip()
        value = value.strip()

        if len(name) > MAX_HEADER_NAME_LEN:
            raise HttpParseError(
                f"Header name too long: {len(name)} > {MAX_HEADER_NAME_LEN}"
            )

        if len(value) > MAX_HEADER_VALUE_LEN:
            raise HttpParseError(
                f"Header value too long: {len(value)} > {MAX_HEADER_VALUE_LEN}"
            )

        if len(headers) >= MAX_HEADERS_COUNT:
            raise HttpParseError(
                f"Too many headers: exceeds limit of {MAX_HEADERS_COUNT}"
            )

        headers[name.lower()] = value

    return method, path, headers


async def read_http_body(
    reader: asyncio.StreamReader,
    headers: dict[str, str],
    max_body_size: int = MAX_BODY_SIZE,
) -> bytes:
    """Read the request body based on the Content-Length header.

    Args:
        reader: The asyncio StreamReader to read from.
        headers: Parsed headers dict (lowercase keys).
        max_body_size: Largest accepted body in bytes.

    Returns:
        The request body as raw bytes.

    Raises:
        HttpParseError: If the body is chunked, too large, or incomplete.
    """
    if "chunked" in headers.get("transfer-encoding", "").lower():
        raise HttpParseError("Chunked request bodies are not supported, send Content-Length")

    content_length_str = headers.get("content-length", "0")
    try:
        content_length = int(content_length_str)
    except ValueError as e:
        raise HttpParseError(f"Invalid Content-Length: {content_length_str}") from e

    if content_length < 0:
        raise HttpParseError(f"Invalid Content-Length: {content_length_str}")

    if content_length > max_body_size:
        raise HttpParseError(
            f"Request body too large: {content_length} > {max_body_size}"
        )

    if content_length == 0:
        return b""

    try:
        return await asyncio.wait_for(
            reader.readexactly(content_length),
            timeout=READ_TIMEOUT,
        )
    except TimeoutError:
        raise HttpParseError("Body read timeout") from None
    except asyncio.IncompleteReadError as e:
        raise HttpParseError(
            f"Incomplete body: expected {content_length}, got {len(e.partial)}"
        ) from e


async def read_http_request(
    reader: asyncio.StreamReader,
    max_body_size: int = MAX_BODY_SIZE,
) -> HttpRequest:
    """Read and parse a full HTTP request from the stream.

    Raises:
        HttpParseError: If the request is malformed or too large.
    """
    method, path, headers = await read_http_request_headers(reader)
    body = await read_http_body(reader, headers, max_body_size)
    return HttpRequest(method=method, path=path, headers=headers, body=body)


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"


async def send_http_response(
    writer: asyncio.StreamWriter,
    response: ProxyResponse,
) -> None:
    """Send an HTTP response.

    Content-Length and Connection are always written by this function, so
    any copies in response.headers are skipped.

    Args:
        writer: The asyncio StreamWriter to write to.
        response: Status, headers and body to send.
    """
    lines = [f"HTTP/1.1 {response.status} {_reason_phrase(response.status)}"]
    for name, value in response.headers:
        if name.lower() in ("content-length", "connection"):
            continue
        lines.append(f"{name}: {value}")
    lines.append(f"Content-Length: {len(response.body)}")
    lines.append("Connection: close")
    lines.append("")
    lines.append("")

    writer.write("\r\n".join(lines).encode("utf-8") + response.body)
    await writer.drain()


async def route_request(http_request: HttpRequest, dispatcher: Dispatcher) -> ProxyResponse:
    """Route a parsed HTTP request to the health check or the proxy handler.

    Args:
        http_request: The parsed HTTP request.
        dispatcher: Dispatcher for proxied calls.

    Returns:
        The response to send.
    """
    if http_request.path == HEALTH_PATH:
        return health_response()

    if http_request.method != "POST":
        return error_response(405, INVALID_REQUEST, "Method not allowed. Use POST.")

    return await handle_proxy_request(http_request.body, dispatcher)


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    dispatcher: Dispatcher,
    max_body_size: int = MAX_BODY_SIZE,
) -> None:
    """Handle a single HTTP connection.

    The pipeline is:
        1. Parse HTTP request
        2. Route by path and method
        3. Send response

    Args:
        reader: The asyncio StreamReader for the connection.
        writer: The asyncio StreamWriter for the connection.
        dispatcher: Dispatcher holding the route table and forwarder.
        max_body_size: Largest accepted request body in bytes.
    """
    try:
        try:
            http_request = await read_http_request(reader, max_body_size)
        except HttpParseError as e:
            await send_http_response(writer, error_response(400, PARSE_ERROR, e.message))
            return

        response = await route_request(http_request, dispatcher)
        await send_http_response(writer, response)

    except (ConnectionResetError, BrokenPipeError) as e:
        logger.debug("Client disconnected before response was sent: %s", e)

    except Exception as e:
        # Catch-all for any unexpected errors
        logger.error("Unexpected error handling connection: %s", e, exc_info=True)
        try:
            await send_http_response(
                writer,
                error_response(500, INTERNAL_ERROR, f"Server error: {type(e).__name__}"),
            )
        except Exception as send_err:
            logger.debug(
                "Failed to send error response (client disconnected?): %s", send_err
            )

    finally:
        try:
            writer.close()
            await writer.wait_closed()
        except Exception as close_err:
            logger.debug("Connection close failed (already closed?): %s", close_err)


async def start_http_server(
    dispatcher: Dispatcher,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    max_concurrent: int = 64,
    max_body_size: int = MAX_BODY_SIZE,
) -> asyncio.Server:
    """Bind the proxy server and start accepting connections.

    Args:
        dispatcher: Dispatcher holding the route table and forwarder.
        host: Host to bind to.
        port: Port to listen on. 0 picks a free port.
        max_concurrent: Maximum connections processed at once.
        max_body_size: Largest accepted request body in bytes.

    Returns:
        The listening asyncio.Server.
    """
    semaphore = asyncio.Semaphore(max_concurrent)

    async def client_handler(
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        async with semaphore:
            await handle_connection(reader, writer, dispatcher, max_body_size)

    server = await asyncio.start_server(client_handler, host=host, port=port)

    addr = server.sockets[0].getsockname() if server.sockets else (host, port)
    logger.info("JSON-RPC proxy listening on http://%s:%s/", addr[0], addr[1])
    return server


async def run_http_server(
    dispatcher: Dispatcher,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    max_concurrent: int = 64,
    max_body_size: int = MAX_BODY_SIZE,
    shutdown_event: asyncio.Event | None = None,
    started_event: asyncio.Event | None = None,
) -> None:
    """Run the proxy server until cancelled or shutdown_event is set.

    Args:
        dispatcher: Dispatcher holding the route table and forwarder.
        host: Host to bind to.
        port: Port to listen on.
        max_concurrent: Maximum connections processed at once.
        max_body_size: Largest accepted request body in bytes.
        shutdown_event: Optional event; the server stops once it is set.
        started_event: Optional event set once the server is listening.
    """
    server = await start_http_server(
        dispatcher,
        host=host,
        port=port,
        max_concurrent=max_concurrent,
        max_body_size=max_body_size,
    )

    if started_event:
        started_event.set()

    async with server:
        if shutdown_event is None:
            await server.serve_forever()
        else:
            await shutdown_event.wait()

    logger.info("HTTP server stopped")
