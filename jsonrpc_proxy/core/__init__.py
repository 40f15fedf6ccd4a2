"""Core types shared across jsonrpc-proxy."""

from jsonrpc_proxy.core.errors import (
    ConfigError,
    ForwardError,
    LoadError,
    MalformedInputError,
    ProxyError,
)

__all__ = [
    "ConfigError",
    "ForwardError",
    "LoadError",
    "MalformedInputError",
    "ProxyError",
]
