"""
Tests for the configuration module.

This test module validates:
- Default configuration values
- Configuration loading from YAML files
- Environment variable overrides
- CLI argument overrides
- Pydantic model validation with invalid inputs
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest import mock

import pytest
import yaml
from pydantic import ValidationError

from plugin_updater.config import (
    AppConfig,
    GitHubConfig,
    LoggingConfig,
    SelfUpdateConfig,
    _deep_merge,
    _load_env_config,
    _load_yaml_config,
    _parse_cli_args,
    _parse_env_value,
    load_config,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def sample_yaml_config() -> dict[str, Any]:
    """Sample YAML configuration for testing."""
    return {
        "github": {"token": "ghp_yaml", "timeout_seconds": 20},
        "install": {"plugins_dir": "/srv/wp/plugins"},
        "components": [
            {
                "slug": "hello/hello.php",
                "repo_url": "octo/hello",
                "version": "1.0.0",
            }
        ],
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_yaml_config: dict[str, Any]) -> Path:
    """Write the sample configuration to a temporary file."""
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump(sample_yaml_config))
    return path


@pytest.fixture(autouse=True)
def _isolated_env() -> Any:
    """Remove PLUGIN_UPDATER_* variables from the environment."""
    with mock.patch.dict("os.environ", {}, clear=True):
        yield


# =============================================================================
# Tests for Default Configuration
# =============================================================================


class TestDefaults:
    """Tests for built-in defaults."""

    def test_app_config_defaults(self) -> None:
        """Test the default AppConfig."""
        config = AppConfig()

        assert config.github.api_base_url == "https://api.github.com"
        assert config.github.user_agent == "WordPress"
        assert config.github.timeout_seconds == 10.0
        assert config.github.token is None
        assert config.self_update.enabled is True
        assert config.self_update.repository_source == "carterfromsl/stratlab-updater"
        assert config.self_update.current_version == "1.0.0"
        assert config.install.plugins_dir == "/var/www/html/wp-content/plugins"
        assert config.logging.level == "info"
        assert config.components == []


# =============================================================================
# Tests for Model Validation
# =============================================================================


class TestValidation:
    """Tests for field validators."""

    def test_api_base_url_trailing_slash(self) -> None:
        """Test that the trailing slash is removed."""
        assert GitHubConfig(api_base_url="https://x.test/api/").api_base_url == (
            "https://x.test/api"
        )

    def test_api_base_url_requires_http(self) -> None:
        """Test that non-http base URLs are rejected."""
        with pytest.raises(ValidationError):
            GitHubConfig(api_base_url="api.github.com")

    @pytest.mark.parametrize("timeout", [0, 301])
    def test_timeout_bounds(self, timeout: int) -> None:
        """Test the timeout range."""
        with pytest.raises(ValidationError):
            GitHubConfig(timeout_seconds=timeout)

    def test_log_level_normalized(self) -> None:
        """Test that 'WARN' becomes 'warning'."""
        assert LoggingConfig(level="WARN").level == "warning"

    def test_invalid_log_level(self) -> None:
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="verbose")

    def test_self_update_override(self) -> None:
        """Test overriding the self-update baseline."""
        assert SelfUpdateConfig(current_version="1.0.1").current_version == "1.0.1"


# =============================================================================
# Tests for Loading Helpers
# =============================================================================


class TestHelpers:
    """Tests for the loading helper functions."""

    def test_deep_merge(self) -> None:
        """Test nested dictionary merging."""
        base = {"github": {"token": "a", "user_agent": "WP"}, "x": 1}
        override = {"github": {"token": "b"}}

        assert _deep_merge(base, override) == {
            "github": {"token": "b", "user_agent": "WP"},
            "x": 1,
        }
        assert base["github"]["token"] == "a"

    def test_load_yaml(self, config_file: Path, sample_yaml_config: dict[str, Any]) -> None:
        """Test loading a YAML file."""
        assert _load_yaml_config(config_file) == sample_yaml_config

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        """Test that an empty file yields an empty dict."""
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert _load_yaml_config(path) == {}

    def test_load_missing_yaml(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            _load_yaml_config(tmp_path / "missing.yml")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("off", False),
            ("15", 15),
            ("2.5", 2.5),
            ("a, b", ["a", "b"]),
            ("ghp_token", "ghp_token"),
        ],
    )
    def test_parse_env_value(self, raw: str, expected: Any) -> None:
        """Test environment value parsing."""
        assert _parse_env_value(raw) == expected

    def test_load_env_config(self) -> None:
        """Test nested environment variables."""
        env = {
            "PLUGIN_UPDATER_GITHUB__TOKEN": "ghp_env",
            "PLUGIN_UPDATER_SELF_UPDATE__ENABLED": "false",
            "UNRELATED": "x",
        }
        with mock.patch.dict("os.environ", env):
            assert _load_env_config() == {
                "github": {"token": "ghp_env"},
                "self_update": {"enabled": False},
            }

    def test_parse_cli_args(self) -> None:
        """Test CLI overrides."""
        assert _parse_cli_args(["--config", "/x.yml", "--log-level", "error"]) == {
            "_config_path": "/x.yml",
            "logging": {"level": "error"},
        }
        assert _parse_cli_args(["--debug", "check"]) == {"logging": {"level": "debug"}}
        assert _parse_cli_args([]) == {}


# =============================================================================
# Tests for load_config
# =============================================================================


class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_defaults_only(self, tmp_path: Path) -> None:
        """Test loading with no file, env or CLI overrides."""
        with mock.patch(
            "plugin_updater.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yml"
        ):
            config = load_config(cli_args=[])

        assert config == AppConfig()

    def test_yaml_file(self, config_file: Path) -> None:
        """Test loading from an explicit YAML path."""
        config = load_config(config_path=config_file, cli_args=[])

        assert config.github.token == "ghp_yaml"
        assert config.github.timeout_seconds == 20
        assert config.install.plugins_dir == "/srv/wp/plugins"
        assert config.components[0]["slug"] == "hello/hello.php"

    def test_config_path_from_cli(self, config_file: Path) -> None:
        """Test that --config selects the YAML file."""
        config = load_config(cli_args=["--config", str(config_file)])
        assert config.github.token == "ghp_yaml"

    def test_env_overrides_yaml(self, config_file: Path) -> None:
        """Test that environment variables beat the YAML file."""
        with mock.patch.dict("os.environ", {"PLUGIN_UPDATER_GITHUB__TOKEN": "ghp_env"}):
            config = load_config(config_path=config_file, cli_args=[])

        assert config.github.token == "ghp_env"
        assert config.github.timeout_seconds == 20

    def test_cli_overrides_env(self, config_file: Path) -> None:
        """Test that CLI flags beat environment variables."""
        with mock.patch.dict("os.environ", {"PLUGIN_UPDATER_LOGGING__LEVEL": "error"}):
            config = load_config(config_path=config_file, cli_args=["--debug"])

        assert config.logging.level == "debug"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that an explicit missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "missing.yml", cli_args=[])

    def test_invalid_value(self, tmp_path: Path) -> None:
        """Test that invalid values raise ValidationError."""
        path = tmp_path / "bad.yml"
        path.write_text(yaml.safe_dump({"logging": {"level": "loud"}}))

        with pytest.raises(ValidationError):
            load_config(config_path=path, cli_args=[])
