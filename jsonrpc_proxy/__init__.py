"""JSON-RPC HTTP proxy that routes calls to backends by method name."""

__version__ = "0.1.0"
