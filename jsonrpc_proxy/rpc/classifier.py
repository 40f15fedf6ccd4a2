"""Classification of inbound payloads into single calls and batches.

The payload is decoded as UTF-8 and parsed once as generic JSON. The
outermost shape then decides the path: an array is a batch, anything else is
a single call. A batch is all-or-nothing: if one element is not a call, the
whole batch is malformed.
"""

import json
from typing import Any

from jsonrpc_proxy.core.errors import MalformedInputError
from jsonrpc_proxy.rpc.protocol import parse_call
from jsonrpc_proxy.rpc.types import Call

_JSON_WHITESPACE = b" \t\r\n"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def decode_text(raw: bytes) -> str:
    """Decode a body as strict UTF-8.

    A byte order mark is left in place, so the JSON parse rejects it.

    Raises:
        ValueError: If raw is not valid UTF-8.
    """
    return raw.decode("utf-8")


def loads_json(raw: bytes | str) -> Any:
    """Decode strict JSON (UTF-8 only; NaN and Infinity are rejected).

    Raises:
        ValueError: If the input is not valid JSON text.
    """
    text = decode_text(raw) if isinstance(raw, bytes) else raw
    return _DECODER.decode(text)


def split_json_array(text: str) -> list[str]:
    """Return the source text of each element of a JSON array.

    Elements come back exactly as written, so numbers keep their spelling
    and string escapes are not re-encoded.

    Raises:
        ValueError: If text is not valid JSON or not an array.
    """
    if not isinstance(_DECODER.decode(text), list):
        raise ValueError("expected array")

    elements: list[str] = []
    pos = text.index("[") + 1
    while True:
        pos = _skip_whitespace(text, pos)
        if text[pos] == "]":
            return elements
        if text[pos] == ",":
            pos = _skip_whitespace(text, pos + 1)
        _, end = _DECODER.raw_decode(text, pos)
        elements.append(text[pos:end])
        pos = end


def _skip_whitespace(text: str, pos: int) -> int:
    while text[pos] in " \t\r\n":
        pos += 1
    return pos


def is_batch_payload(raw: bytes) -> bool:
    """Check whether the first significant character of raw is '['."""
    trimmed = raw.strip(_JSON_WHITESPACE)
    return trimmed.startswith(b"[")


def classify(raw: bytes) -> Call | list[Call]:
    """Classify a raw request body.

    Args:
        raw: The request body exactly as received.

    Returns:
        A Call for a single request, or a list of Calls for a batch
        (possibly empty).

    Raises:
        MalformedInputError: If the body is not UTF-8 JSON, or it does not
            have the shape of a call or a batch of calls.
    """
    try:
        data = loads_json(raw)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise MalformedInputError(f"Invalid JSON: {e}", invalid_json=True) from e

    if is_batch_payload(raw):
        try:
            return [parse_call(item) for item in data]
        except MalformedInputError as e:
            raise MalformedInputError(f"Invalid JSON-RPC batch request: {e.message}") from e

    try:
        return parse_call(data)
    except MalformedInputError as e:
        raise MalformedInputError(f"Invalid JSON-RPC request: {e.message}") from e
