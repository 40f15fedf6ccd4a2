"""Logging setup and object wiring for the proxy server.

Usage:
    configure_logging(logging.INFO, log_file=Path("logs/proxy.log"))
    await serve(config)
"""

from __future__ import annotations

import asyncio
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from jsonrpc_proxy.config.schema import Config
from jsonrpc_proxy.forwarder import Forwarder
from jsonrpc_proxy.routing.dispatcher import Dispatcher
from jsonrpc_proxy.routing.table import RouteTable
from jsonrpc_proxy.server.http import run_http_server

logger = logging.getLogger(__name__)

LOGGER_NAMESPACE = "jsonrpc_proxy"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
) -> None:
    """Configure logging for the jsonrpc_proxy namespace.

    Sets up a stderr handler and, if log_file is given, a rotating file
    handler (max 5MB per file, 3 backup files). Existing handlers are
    removed first so reconfiguring never duplicates output.

    Args:
        level: Logging level for both handlers.
        log_file: Optional path of the log file. Its directory is created.
    """
    proxy_logger = logging.getLogger(LOGGER_NAMESPACE)
    proxy_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates on reconfigure
    for handler in list(proxy_logger.handlers):
        proxy_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    proxy_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        proxy_logger.addHandler(file_handler)

    # Don't propagate to root logger
    proxy_logger.propagate = False


async def serve(
    config: Config,
    shutdown_event: asyncio.Event | None = None,
    started_event: asyncio.Event | None = None,
) -> None:
    """Build the route table and forwarder from config and run the server.

    Runs until cancelled or shutdown_event is set. The forwarder's HTTP
    client is closed on the way out.
    """
    table = RouteTable.from_config(config)

    logger.info("Default URL: %s", table.default)
    logger.info("Loaded %d method-specific routes", len(table))

    async with Forwarder(
        timeout=config.forward.timeout,
        verify_ssl=config.forward.verify_ssl,
    ) as forwarder:
        await run_http_server(
            Dispatcher(table, forwarder),
            host=config.server.host,
            port=config.server.port,
            max_concurrent=config.server.max_connections,
            max_body_size=config.server.max_body_size,
            shutdown_event=shutdown_event,
            started_event=started_event,
        )
