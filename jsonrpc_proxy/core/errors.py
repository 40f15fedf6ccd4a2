"""Typed exception hierarchy for jsonrpc-proxy."""

from __future__ import annotations


class ProxyError(Exception):
    """Base class for all jsonrpc-proxy errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(ProxyError):
    """Raised for configuration issues (missing file, invalid YAML/JSON, validation failure)."""


class LoadError(ProxyError):
    """Raised when a config file cannot be read or parsed."""


class MalformedInputError(ProxyError):
    """Raised when an inbound payload is not valid JSON or not a valid call/batch.

    Attributes:
        invalid_json: True if the payload failed the generic JSON parse,
            False if it parsed but did not have the shape of a call.
    """

    def __init__(self, message: str, invalid_json: bool = False) -> None:
        self.invalid_json = invalid_json
        super().__init__(message)


class ForwardError(ProxyError):
    """Raised when a payload could not be delivered to an upstream endpoint."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Forward to {url} failed: {reason}")
