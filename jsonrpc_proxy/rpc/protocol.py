"""JSON-RPC 2.0 call parsing and serialization."""

import json
from typing import Any

from jsonrpc_proxy.core.errors import MalformedInputError
from jsonrpc_proxy.rpc.types import Call, RequestId, Response

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
INTERNAL_ERROR = -32603


def parse_call(data: Any) -> Call:
    """Build a Call from an already-decoded JSON value.

    Only the members routing depends on are checked. Everything else in the
    object (params, jsonrpc, extension members) is carried along untouched.

    Args:
        data: A decoded JSON value, expected to be an object.

    Returns:
        The parsed Call.

    Raises:
        MalformedInputError: If the value is not an object, or method/id
            have the wrong JSON type.
    """
    if not isinstance(data, dict):
        raise MalformedInputError(f"Call must be a JSON object, got: {_json_type(data)}")

    method = data.get("method", "")
    if not isinstance(method, str):
        raise MalformedInputError(f"method must be a string, got: {_json_type(method)}")

    has_id = "id" in data
    request_id = data.get("id")
    if request_id is not None and (
        isinstance(request_id, bool) or not isinstance(request_id, (str, int, float))
    ):
        raise MalformedInputError(
            f"id must be string, number, or null, got: {_json_type(request_id)}"
        )

    return Call(method=method, id=request_id, has_id=has_id, payload=data)


def serialize_call(call: Call) -> str:
    """Serialize a Call back to compact JSON text.

    The parsed object is dumped as-is, so member order and id type survive.
    Non-ASCII text is written as \\u escapes.

    Raises:
        ValueError: If a number in the call overflowed to infinity when parsed.
    """
    return json.dumps(call.payload, separators=(",", ":"), allow_nan=False)


def serialize_response(response: Response) -> str:
    """Serialize a Response to a single line of JSON (no trailing newline)."""
    data: dict[str, Any] = {
        "jsonrpc": response.jsonrpc,
        "id": response.id,
    }

    if response.error is not None:
        data["error"] = response.error
    else:
        data["result"] = response.result

    return json.dumps(data, separators=(",", ":"))


def make_error_response(
    request_id: RequestId,
    code: int,
    message: str,
    data: Any = None,
) -> Response:
    """Create an error response.

    Args:
        request_id: The id from the original request, or None if unknown.
        code: JSON-RPC error code.
        message: Human-readable error message.
        data: Optional additional error data.

    Returns:
        A Response with the error field populated.
    """
    error: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if data is not None:
        error["data"] = data

    return Response(
        jsonrpc="2.0",
        id=request_id,
        error=error,
    )


def _json_type(value: Any) -> str:
    """Name a decoded JSON value by its JSON type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
