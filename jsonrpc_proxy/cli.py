"""Command-line entry point for jsonrpc-proxy.

Example:
    jsonrpc-proxy --config config.yaml --port 8080

    curl -X POST -H "Content-Type: application/json" \\
        --data '{"jsonrpc":"2.0","method":"eth_chainId","params":[],"id":1}' \\
        http://localhost:8080
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv

from jsonrpc_proxy.bootstrap import configure_logging, serve
from jsonrpc_proxy.config.loader import DEFAULT_CONFIG_PATH, load_config, resolve_config_path
from jsonrpc_proxy.core.errors import ConfigError

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="jsonrpc-proxy",
        description="JSON-RPC HTTP proxy that routes calls to backends by method name",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH}, env: CONFIG_PATH)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to run the proxy server on (default: from config, 8080; env: PORT)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host address to bind to (default: from config, 0.0.0.0)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable DEBUG logging",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the proxy. Returns the process exit code."""
    # Load .env file if present
    load_dotenv()

    args = parse_args(argv)
    config_path = resolve_config_path(args.config)

    # Log config problems (including a bad PORT) before the real level is known
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = load_config(config_path, port=args.port, host=args.host)
    except ConfigError as e:
        logger.error("Failed to load configuration: %s", e.message)
        return 1

    level = logging.DEBUG if args.verbose else getattr(logging, config.server.log_level)
    configure_logging(level, config.server.log_file)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except OSError as e:
        logger.error("Failed to start server: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
