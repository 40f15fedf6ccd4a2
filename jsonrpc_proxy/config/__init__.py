"""Configuration loading and validation."""

from jsonrpc_proxy.config.loader import (
    DEFAULT_CONFIG_PATH,
    load_config,
    resolve_config_path,
)
from jsonrpc_proxy.config.schema import (
    Config,
    ForwardConfig,
    RouteConfig,
    ServerConfig,
)

__all__ = [
    "Config",
    "DEFAULT_CONFIG_PATH",
    "ForwardConfig",
    "RouteConfig",
    "ServerConfig",
    "load_config",
    "resolve_config_path",
]
