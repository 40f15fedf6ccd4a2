"""File loading utilities for config files.

Use:
- load_json_file() for .json config files
- load_yaml_file() for .yaml/.yml config files
- load_config_file() to pick one based on the file suffix

All three raise LoadError so callers deal with a single error type.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from jsonrpc_proxy.core.errors import LoadError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _read_text(path: Path, context_prefix: str) -> str:
    resolved = path.resolve()

    if not resolved.is_file():
        raise LoadError(f"{context_prefix}File not found: {path}")

    try:
        return resolved.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise LoadError(f"{context_prefix}Failed to read file {path}: {e}") from e


def _require_mapping(result: Any, path: Path, context_prefix: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise LoadError(
            f"{context_prefix}Expected a mapping in {path}, got {type(result).__name__}"
        )
    return result


def load_json_file(path: Path, error_context: str = "") -> dict[str, Any]:
    """Load and parse a JSON file with consistent error handling.

    Args:
        path: Path to the JSON file to load.
        error_context: Optional context string for error messages (e.g., "config").

    Returns:
        Parsed JSON as a dict. Returns empty dict if file is empty.

    Raises:
        LoadError: If the file doesn't exist, can't be read, contains invalid JSON,
            or contains non-dict JSON (e.g., array or scalar).
    """
    context_prefix = f"{error_context}: " if error_context else ""
    content = _read_text(path, context_prefix).strip()

    # Empty file is valid - return empty dict
    if not content:
        return {}

    try:
        result = json.loads(content)
    except json.JSONDecodeError as e:
        raise LoadError(f"{context_prefix}Invalid JSON in {path}: {e}") from e

    return _require_mapping(result, path, context_prefix)


def load_yaml_file(path: Path, error_context: str = "") -> dict[str, Any]:
    """Load and parse a YAML file with yaml.safe_load.

    Args:
        path: Path to the YAML file to load.
        error_context: Optional context string for error messages.

    Returns:
        Parsed YAML as a dict. Returns empty dict if the document is empty.

    Raises:
        LoadError: If the file doesn't exist, can't be read, contains invalid YAML,
            or its top level is not a mapping.
    """
    context_prefix = f"{error_context}: " if error_context else ""
    content = _read_text(path, context_prefix)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise LoadError(f"{context_prefix}Invalid YAML in {path}: {e}") from e

    if result is None:
        return {}

    return _require_mapping(result, path, context_prefix)


def load_config_file(path: Path, error_context: str = "") -> dict[str, Any]:
    """Load a config file, choosing the parser from its suffix.

    .yaml and .yml go through the YAML loader, everything else through JSON.
    """
    logger.debug("Loading config file: %s", path)
    if path.suffix.lower() in YAML_SUFFIXES:
        return load_yaml_file(path, error_context)
    return load_json_file(path, error_context)
