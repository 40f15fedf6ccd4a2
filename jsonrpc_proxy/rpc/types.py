"""JSON-RPC 2.0 types used for routing."""

from dataclasses import dataclass, field
from typing import Any

# JSON type of a request id. Kept as parsed so 1 and "1" never collapse.
RequestId = str | int | float | None


@dataclass(frozen=True)
class Call:
    """One JSON-RPC invocation, reduced to what routing needs.

    Attributes:
        method: Name of the method to invoke. Empty string if the call had no method.
        id: Request identifier as it appeared on the wire (number, string or null).
        has_id: False when the call carried no "id" member (a notification).
        payload: The full parsed call object, used when the call is re-serialized.
    """

    method: str
    id: RequestId = None
    has_id: bool = False
    payload: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass
class Response:
    """JSON-RPC 2.0 response generated by the proxy itself.

    Attributes:
        jsonrpc: Protocol version, always "2.0".
        id: Request identifier from the original request.
        result: Result of the method call (mutually exclusive with error).
        error: Error object if the call failed (mutually exclusive with result).
    """

    jsonrpc: str
    id: RequestId
    result: Any | None = None
    error: dict[str, Any] | None = None
