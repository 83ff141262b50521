"""
Configuration management for the plugin updater.

Configuration is loaded from multiple sources with layered precedence:
1. Built-in defaults (Pydantic model defaults)
2. YAML config file (/etc/plugin-updater/config.yml or --config path)
3. Environment variables (PLUGIN_UPDATER_* prefix, __ for nesting)
4. Command-line arguments (highest precedence)
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("/etc/plugin-updater/config.yml")
DEFAULT_ENV_PREFIX = "PLUGIN_UPDATER_"

# =============================================================================
# GitHub Configuration
# =============================================================================


class GitHubConfig(BaseModel):
    """GitHub release API settings.

    Attributes:
        api_base_url: Base URL of the GitHub REST API.
        user_agent: User-Agent header sent with every request.
        timeout_seconds: HTTP timeout for one release lookup.
        token: Default access token used when a component has none.
    """

    api_base_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API",
    )
    user_agent: str = Field(
        default="WordPress",
        description="User-Agent header identifying the requesting client",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout in seconds for a release lookup",
        ge=1,
        le=300,
    )
    token: str | None = Field(
        default=None,
        description="Default access token for private repositories",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid api_base_url: {v}. Must be an http(s) URL")
        return v.rstrip("/")


# =============================================================================
# Self-update Configuration
# =============================================================================


class SelfUpdateConfig(BaseModel):
    """The updater's own package, checked like any other component.

    Attributes:
        enabled: Whether the updater checks for its own releases.
        identifier: Plugin slug of the updater.
        repository_source: Repository the updater is released from.
        current_version: Baseline version compared against the latest tag.
        auto_update: Whether the host should auto-update the updater.
    """

    enabled: bool = Field(default=True, description="Check for updater releases")
    identifier: str = Field(
        default="stratlab-updater/stratlab-updater.php",
        description="Plugin slug of the updater itself",
    )
    repository_source: str = Field(
        default="carterfromsl/stratlab-updater",
        description="Repository the updater is released from",
    )
    current_version: str = Field(
        default="1.0.0",
        description="Baseline version of the installed updater",
    )
    auto_update: bool = Field(
        default=True,
        description="Enable host auto-updates for the updater",
    )


# =============================================================================
# Install Configuration
# =============================================================================


class InstallConfig(BaseModel):
    """Post-install relocation settings.

    Attributes:
        plugins_dir: Directory holding one sub-directory per installed plugin.
    """

    plugins_dir: str = Field(
        default="/var/www/html/wp-content/plugins",
        description="Directory holding installed plugins",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level.
        log_to_stdout: Whether to log to stdout.
        json_format: Emit JSON records instead of plain text.
    """

    level: str = Field(default="info", description="Log level")
    log_to_stdout: bool = Field(default=True, description="Whether to log to stdout")
    json_format: bool = Field(default=True, description="Emit JSON log records")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"debug", "info", "warn", "warning", "error", "critical"}
        v_lower = v.lower()
        if v_lower not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        if v_lower == "warn":
            return "warning"
        return v_lower


# =============================================================================
# Main Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """
    Main application configuration model.

    Attributes:
        github: GitHub API settings.
        self_update: The updater's own registration.
        install: Post-install relocation settings.
        logging: Logging configuration.
        components: Registration payloads replayed at the start of a cycle.
    """

    github: GitHubConfig = Field(
        default_factory=GitHubConfig,
        description="GitHub API settings",
    )
    self_update: SelfUpdateConfig = Field(
        default_factory=SelfUpdateConfig,
        description="Self-update settings",
    )
    install: InstallConfig = Field(
        default_factory=InstallConfig,
        description="Install relocation settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    components: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Component registration payloads",
    )


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: The base dictionary.
        override: The dictionary with values to override.

    Returns:
        A new dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to an appropriate Python type.

    Args:
        value: String value from environment variable.

    Returns:
        Parsed value (bool, int, float, list, or string).
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if "," in value:
        return [_parse_env_value(item.strip()) for item in value.split(",")]

    return value


def _load_env_config(prefix: str = DEFAULT_ENV_PREFIX) -> dict[str, Any]:
    """
    Load configuration from environment variables.

    Nested keys use a double underscore, e.g.
    ``PLUGIN_UPDATER_GITHUB__TOKEN=ghp_xxx``.

    Args:
        prefix: Environment variable prefix.

    Returns:
        Dictionary with configuration values.
    """
    result: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        parts = key[len(prefix) :].lower().split("__")

        current = result
        for part in parts[:-1]:
            current = current.setdefault(part, {})

        current[parts[-1]] = _parse_env_value(value)

    return result


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the command-line parser shared by the CLI and config loading."""
    parser = argparse.ArgumentParser(
        prog="plugin-updater",
        description="Centralized GitHub release updater for WordPress plugins",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        help="Override log level",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("check", help="List components with a newer release")
    info = subparsers.add_parser("info", help="Show release details for a component")
    info.add_argument("slug", help="Component identifier")

    return parser


def _cli_overrides(parsed: argparse.Namespace) -> dict[str, Any]:
    """
    Convert parsed command-line arguments into a config override dict.

    Args:
        parsed: Namespace returned by the parser.

    Returns:
        Dictionary with overrides; ``_config_path`` carries --config.
    """
    result: dict[str, Any] = {}

    if parsed.config:
        result["_config_path"] = parsed.config

    if parsed.log_level:
        result["logging"] = {"level": parsed.log_level}

    if parsed.debug:
        result["logging"] = {"level": "debug"}

    return result


def _parse_cli_args(args: list[str] | None = None) -> dict[str, Any]:
    """
    Parse command-line arguments into config overrides.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Dictionary with parsed arguments.
    """
    return _cli_overrides(build_arg_parser().parse_args(args))


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    cli_args: list[str] | None = None,
) -> AppConfig:
    """
    Load configuration from all sources with layered precedence.

    Args:
        config_path: Path to YAML configuration file. If None, uses the CLI
            --config argument or the default path when it exists.
        env_prefix: Prefix for environment variables.
        cli_args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Fully configured AppConfig instance.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValidationError: If configuration is invalid.

    Example:
        >>> config = load_config(cli_args=[])
        >>> config.github.api_base_url
        'https://api.github.com'
    """
    config_dict: dict[str, Any] = {}

    cli_config = _parse_cli_args(cli_args)

    if config_path is None:
        if "_config_path" in cli_config:
            config_path = Path(cli_config.pop("_config_path"))
        elif DEFAULT_CONFIG_PATH.exists():
            config_path = DEFAULT_CONFIG_PATH
    else:
        cli_config.pop("_config_path", None)
        config_path = Path(config_path)

    if config_path is not None:
        config_dict = _deep_merge(config_dict, _load_yaml_config(config_path))

    config_dict = _deep_merge(config_dict, _load_env_config(env_prefix))
    config_dict = _deep_merge(config_dict, cli_config)

    return AppConfig(**config_dict)
