"""Tests for configuration loading, validation and overrides."""

import logging
from pathlib import Path

import pytest

from jsonrpc_proxy.config.loader import DEFAULT_CONFIG_PATH, load_config, resolve_config_path
from jsonrpc_proxy.core.errors import ConfigError

CONFIG_YAML = """\
default_url: "https://mainnet.example/rpc"
routes:
  - method: "eth_chainId"
    url: "https://polygon.example/rpc"
  - method: "eth_blockNumber"
    url: "https://ankr.example/eth"
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_loads_yaml_config(self, config_file: Path) -> None:
        """Default URL and routes are read from YAML, with server defaults."""
        config = load_config(config_file, environ={})

        assert config.default_url == "https://mainnet.example/rpc"
        assert [(r.method, r.url) for r in config.routes] == [
            ("eth_chainId", "https://polygon.example/rpc"),
            ("eth_blockNumber", "https://ankr.example/eth"),
        ]
        assert config.server.port == 8080
        assert config.server.host == "0.0.0.0"
        assert config.server.log_level == "INFO"
        assert config.forward.timeout == 30.0

    def test_loads_json_config(self, tmp_path: Path) -> None:
        """JSON config files are accepted too."""
        path = tmp_path / "config.json"
        path.write_text(
            '{"default_url": "http://d.test", "server": {"port": 9000}}', encoding="utf-8"
        )

        config = load_config(path, environ={})

        assert config.default_url == "http://d.test"
        assert config.server.port == 9000

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file is a ConfigError."""
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "nope.yaml", environ={})

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Unparseable YAML is a ConfigError."""
        path = tmp_path / "config.yaml"
        path.write_text("default_url: [\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path, environ={})

    @pytest.mark.parametrize(
        "content",
        ["routes: []\n", 'default_url: ""\n', 'default_url: "   "\n'],
    )
    def test_missing_default_url(self, tmp_path: Path, content: str) -> None:
        """A config without a usable default_url refuses to load."""
        path = tmp_path / "config.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigError, match="default_url"):
            load_config(path, environ={})

    def test_route_missing_url(self, tmp_path: Path) -> None:
        """Each route needs both method and url."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "default_url: http://d.test\nroutes:\n  - method: eth_call\n", encoding="utf-8"
        )

        with pytest.raises(ConfigError, match="validation failed"):
            load_config(path, environ={})

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        """Typos in key names are reported instead of ignored."""
        path = tmp_path / "config.yaml"
        path.write_text("default_url: http://d.test\ndefualt_timeout: 5\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path, environ={})

    def test_duplicate_methods_are_loaded(self, tmp_path: Path) -> None:
        """Repeated methods are kept in file order for the route table to resolve."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "default_url: http://d.test\n"
            "routes:\n"
            "  - {method: m, url: http://first.test}\n"
            "  - {method: m, url: http://second.test}\n",
            encoding="utf-8",
        )

        config = load_config(path, environ={})

        assert [r.url for r in config.routes] == ["http://first.test", "http://second.test"]


class TestOverrides:
    """Tests for command-line and environment overrides."""

    def test_cli_port_and_host_override_file(self, config_file: Path) -> None:
        """Flags win over the file."""
        config = load_config(config_file, port=9001, host="127.0.0.1", environ={})

        assert config.server.port == 9001
        assert config.server.host == "127.0.0.1"

    def test_env_port_overrides_cli(self, config_file: Path) -> None:
        """PORT wins over both the file and the flag."""
        config = load_config(config_file, port=9001, environ={"PORT": "9100"})

        assert config.server.port == 9100

    def test_invalid_env_port_is_ignored(
        self, config_file: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A non-numeric PORT logs a warning and falls back."""
        logger = logging.getLogger("jsonrpc_proxy")
        propagate = logger.propagate
        logger.propagate = True
        try:
            with caplog.at_level(logging.WARNING, logger="jsonrpc_proxy.config.loader"):
                config = load_config(config_file, port=9001, environ={"PORT": "eighty"})
        finally:
            logger.propagate = propagate

        assert config.server.port == 9001
        assert "Invalid PORT" in caplog.text

    def test_out_of_range_env_port_fails(self, config_file: Path) -> None:
        """A numeric PORT outside 0-65535 fails validation."""
        with pytest.raises(ConfigError):
            load_config(config_file, environ={"PORT": "70000"})

    def test_env_log_level(self, config_file: Path) -> None:
        """LOG_LEVEL is applied case-insensitively."""
        config = load_config(config_file, environ={"LOG_LEVEL": "debug"})

        assert config.server.log_level == "DEBUG"

    def test_empty_env_values_are_ignored(self, config_file: Path) -> None:
        """Empty environment variables count as unset."""
        config = load_config(config_file, environ={"PORT": "", "LOG_LEVEL": ""})

        assert config.server.port == 8080
        assert config.server.log_level == "INFO"

    def test_overrides_merge_with_file_server_section(self, tmp_path: Path) -> None:
        """Overriding the port keeps other server settings from the file."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "default_url: http://d.test\nserver:\n  host: 10.0.0.1\n  max_connections: 8\n",
            encoding="utf-8",
        )

        config = load_config(path, port=7000, environ={})

        assert config.server.port == 7000
        assert config.server.host == "10.0.0.1"
        assert config.server.max_connections == 8


class TestResolveConfigPath:
    """Tests for resolve_config_path."""

    def test_default(self) -> None:
        """Without flag or env the default path is used."""
        assert resolve_config_path(None, environ={}) == DEFAULT_CONFIG_PATH

    def test_flag(self) -> None:
        """The flag is used when CONFIG_PATH is unset."""
        assert resolve_config_path(Path("a.yaml"), environ={}) == Path("a.yaml")

    def test_env_wins(self) -> None:
        """CONFIG_PATH beats the flag."""
        path = resolve_config_path(Path("a.yaml"), environ={"CONFIG_PATH": "/etc/proxy.yaml"})

        assert path == Path("/etc/proxy.yaml")

    def test_empty_env_ignored(self) -> None:
        """An empty CONFIG_PATH counts as unset."""
        assert resolve_config_path(Path("a.yaml"), environ={"CONFIG_PATH": ""}) == Path("a.yaml")
