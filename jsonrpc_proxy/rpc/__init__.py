"""JSON-RPC 2.0 call handling for the proxy.

Example:
    call_or_batch = classify(b'{"jsonrpc":"2.0","method":"eth_chainId","id":1}')
"""

from jsonrpc_proxy.rpc.classifier import (
    classify,
    decode_text,
    is_batch_payload,
    loads_json,
    split_json_array,
)
from jsonrpc_proxy.rpc.protocol import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    PARSE_ERROR,
    make_error_response,
    parse_call,
    serialize_call,
    serialize_response,
)
from jsonrpc_proxy.rpc.types import Call, RequestId, Response

__all__ = [
    # Types
    "Call",
    "RequestId",
    "Response",
    # Classification
    "classify",
    "is_batch_payload",
    "loads_json",
    "decode_text",
    "split_json_array",
    # Protocol functions
    "parse_call",
    "serialize_call",
    "serialize_response",
    "make_error_response",
    # Error codes
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "INTERNAL_ERROR",
]
