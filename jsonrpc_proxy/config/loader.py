"""Configuration loading with fail-fast behavior and environment overrides.

Values are layered, lowest to highest precedence:
1. The config file (YAML or JSON)
2. Command-line flags (port, host)
3. Environment variables (PORT, LOG_LEVEL), for container deployments

The config path itself follows the same rule: CONFIG_PATH beats --config.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from jsonrpc_proxy.config.load_utils import load_config_file
from jsonrpc_proxy.config.schema import Config
from jsonrpc_proxy.core.errors import ConfigError, LoadError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

CONFIG_PATH_ENV = "CONFIG_PATH"
PORT_ENV = "PORT"
LOG_LEVEL_ENV = "LOG_LEVEL"


def resolve_config_path(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Pick the config file to load.

    Args:
        path: Path given on the command line, if any.
        environ: Environment to read CONFIG_PATH from. Defaults to os.environ.

    Returns:
        CONFIG_PATH if set and non-empty, else path, else config.yaml.
    """
    env = os.environ if environ is None else environ
    env_path = env.get(CONFIG_PATH_ENV, "")
    if env_path:
        return Path(env_path)
    return path if path is not None else DEFAULT_CONFIG_PATH


def _server_overrides(
    port: int | None,
    host: str | None,
    env: Mapping[str, str],
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if port is not None:
        overrides["port"] = port
    if host is not None:
        overrides["host"] = host

    env_port = env.get(PORT_ENV, "")
    if env_port:
        try:
            overrides["port"] = int(env_port)
        except ValueError:
            logger.warning("Invalid PORT environment variable: %s", env_port)

    env_level = env.get(LOG_LEVEL_ENV, "")
    if env_level:
        overrides["log_level"] = env_level.upper()

    return overrides


def load_config(
    path: Path,
    port: int | None = None,
    host: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Load and validate configuration from a file, applying overrides.

    Args:
        path: Config file path (.yaml, .yml or .json).
        port: Port from the command line, overrides the file.
        host: Bind host from the command line, overrides the file.
        environ: Environment for PORT/LOG_LEVEL. Defaults to os.environ.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If the file doesn't exist, can't be parsed, or fails validation
            (including a missing or empty default_url).
    """
    env = os.environ if environ is None else environ

    try:
        data = load_config_file(path, error_context="config")
    except LoadError as e:
        raise ConfigError(e.message) from e

    overrides = _server_overrides(port, host, env)
    if overrides:
        server = data.get("server") or {}
        if isinstance(server, dict):
            data["server"] = {**server, **overrides}

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e

    logger.debug("Config loaded from: %s", path)
    return config
