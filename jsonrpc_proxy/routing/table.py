"""Method-name routing table."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from jsonrpc_proxy.core.errors import ConfigError

if TYPE_CHECKING:
    from jsonrpc_proxy.config.schema import Config, RouteConfig


@dataclass(frozen=True)
class RouteTable:
    """Immutable mapping from method name to destination URL.

    Built once at startup and shared by every request. Lookups never fail:
    methods without an explicit route resolve to the default URL.

    Attributes:
        default: Destination for methods absent from by_method.
        by_method: Read-only method -> URL mapping.
    """

    default: str
    by_method: Mapping[str, str]

    @classmethod
    def build(cls, routes: Iterable[RouteConfig], default: str) -> RouteTable:
        """Build a table from an ordered sequence of routes.

        When a method appears more than once, the last entry wins.

        Raises:
            ConfigError: If default is empty.
        """
        if not default:
            raise ConfigError("default_url is required in configuration")

        by_method: dict[str, str] = {}
        for route in routes:
            by_method[route.method] = route.url

        return cls(default=default, by_method=MappingProxyType(by_method))

    @classmethod
    def from_config(cls, config: Config) -> RouteTable:
        """Build a table from a validated Config."""
        return cls.build(config.routes, config.default_url)

    def resolve(self, method: str) -> str:
        """Return the destination for method, falling back to the default."""
        return self.by_method.get(method, self.default)

    def __contains__(self, method: object) -> bool:
        return method in self.by_method

    def __len__(self) -> int:
        return len(self.by_method)
