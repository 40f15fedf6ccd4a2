"""Turns an inbound request body into the response sent back to the caller."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from jsonrpc_proxy.core.errors import ForwardError, MalformedInputError
from jsonrpc_proxy.routing.dispatcher import Dispatcher, join_records
from jsonrpc_proxy.rpc.classifier import classify
from jsonrpc_proxy.rpc.protocol import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    PARSE_ERROR,
    make_error_response,
    serialize_response,
)
from jsonrpc_proxy.rpc.types import RequestId

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

# Stripped when relaying upstream headers: the body has already been
# de-chunked and decompressed, and the server writes its own framing.
HOP_BY_HOP_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-connection",
    "transfer-encoding",
    "content-length",
    "content-encoding",
    "te",
    "trailer",
    "upgrade",
})

HEALTH_BODY = b'{"status":"ok"}'


@dataclass
class ProxyResponse:
    """Response handed back to the HTTP layer.

    Attributes:
        status: HTTP status code.
        headers: Headers to send, in order. Content-Length is added by the server.
        body: Response body.
    """

    status: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""


def error_response(
    status: int,
    code: int,
    message: str,
    request_id: RequestId = None,
) -> ProxyResponse:
    """Build a JSON-RPC error response with the given HTTP status."""
    body = serialize_response(make_error_response(request_id, code, message))
    return ProxyResponse(
        status=status,
        headers=[("Content-Type", JSON_CONTENT_TYPE)],
        body=body.encode("utf-8"),
    )


def health_response() -> ProxyResponse:
    """Fixed liveness response."""
    return ProxyResponse(
        status=200,
        headers=[("Content-Type", JSON_CONTENT_TYPE)],
        body=HEALTH_BODY,
    )


def relay_headers(headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Drop hop-by-hop and framing headers, keep everything else in order."""
    return [(name, value) for name, value in headers if name.lower() not in HOP_BY_HOP_HEADERS]


async def handle_proxy_request(body: bytes, dispatcher: Dispatcher) -> ProxyResponse:
    """Classify body and route it through the dispatcher.

    Args:
        body: The raw inbound request body.
        dispatcher: Dispatcher holding the route table and forwarder.

    Returns:
        The response for the caller:
        - 400 if the body is not valid JSON or not a call/batch
        - the upstream status/headers/body for a single call
        - 500 if a single call could not be forwarded
        - 200 with the merged JSON array for a batch
    """
    try:
        classified = classify(body)
    except MalformedInputError as e:
        code = PARSE_ERROR if e.invalid_json else INVALID_REQUEST
        message = "Invalid JSON" if e.invalid_json else e.message
        logger.debug("Rejected malformed request: %s", e.message)
        return error_response(400, code, message)

    if isinstance(classified, list):
        records = await dispatcher.dispatch_batch(classified)
        return ProxyResponse(
            status=200,
            headers=[("Content-Type", JSON_CONTENT_TYPE)],
            body=join_records(records),
        )

    try:
        upstream = await dispatcher.dispatch_single(classified, body)
    except ForwardError as e:
        logger.error("Proxy error for method '%s': %s", classified.method, e.message)
        return error_response(
            500, INTERNAL_ERROR, "Proxy error: upstream request failed", classified.id
        )

    return ProxyResponse(
        status=upstream.status_code,
        headers=relay_headers(upstream.headers),
        body=upstream.body,
    )
