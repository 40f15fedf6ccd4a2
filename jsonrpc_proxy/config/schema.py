"""Pydantic models for jsonrpc-proxy configuration validation."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RouteConfig(BaseModel):
    """A single method-to-URL mapping.

    Example in config.yaml:
        routes:
          - method: "eth_chainId"
            url: "https://polygon-rpc.com"
    """

    model_config = ConfigDict(extra="forbid")

    method: str = Field(min_length=1)
    """JSON-RPC method name, matched exactly and case-sensitively."""

    url: str = Field(min_length=1)
    """Destination URL calls to this method are forwarded to."""


class ServerConfig(BaseModel):
    """Configuration for the inbound HTTP server.

    Example in config.yaml:
        server:
          host: "0.0.0.0"
          port: 8080
          log_level: "INFO"
    """

    model_config = ConfigDict(extra="forbid")

    host: str = "0.0.0.0"
    """Host address to bind to."""

    port: int = Field(default=8080, ge=0, le=65535)
    """Port number for the HTTP server (0 picks a free port)."""

    max_connections: int = Field(default=64, ge=1)
    """Maximum number of requests processed at the same time."""

    max_body_size: int = Field(default=10 * 1024 * 1024, ge=1024)
    """Largest accepted request body in bytes."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    """Logging level for proxy operations."""

    log_file: Path | None = None
    """Optional rotating log file. None logs to stderr only."""


class ForwardConfig(BaseModel):
    """Configuration for the outbound HTTP client."""

    model_config = ConfigDict(extra="forbid")

    timeout: float = Field(default=30.0, gt=0)
    """Timeout in seconds for each upstream request."""

    verify_ssl: bool = True
    """Verify upstream TLS certificates."""


class Config(BaseModel):
    """Root configuration model.

    Example config.yaml:
        default_url: "https://mainnet.infura.io/v3/your-project-id"
        routes:
          - method: "eth_chainId"
            url: "https://polygon-rpc.com"
          - method: "eth_blockNumber"
            url: "https://rpc.ankr.com/eth"
    """

    model_config = ConfigDict(extra="forbid")

    default_url: str
    """URL for methods without a specific route."""

    routes: list[RouteConfig] = []
    """Method-specific routes. Later entries win over earlier ones for the same method."""

    server: ServerConfig = ServerConfig()
    forward: ForwardConfig = ForwardConfig()

    @field_validator("default_url")
    @classmethod
    def validate_default_url(cls, v: str) -> str:
        """Reject an empty default destination."""
        if not v.strip():
            raise ValueError("default_url is required in configuration")
        return v
