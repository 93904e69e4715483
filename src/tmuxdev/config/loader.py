"""Configuration loading and management."""

import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.logging import ConfigurationError, LogContext, get_logger

logger = get_logger(__name__, LogContext.CONFIG)

ENV_PREFIX = "TMUXDEV_"


class LaunchMode(str, Enum):
    """How the development-server command reaches a new session."""

    INITIAL_COMMAND = "initial-command"
    SEND_KEYS = "send-keys"


class TmuxdevConfig(BaseModel):
    """Configuration model for tmuxdev."""

    # Session content
    dev_command: str = Field(
        default="pnpm dev", description="Command started inside a new session"
    )
    launch_mode: LaunchMode = Field(
        default=LaunchMode.INITIAL_COMMAND,
        description="Pass the command to new-session or type it with send-keys",
    )

    # Identity
    fallback_name: str = Field(
        default="tmuxdev",
        description="Session name used when the folder name cannot be determined",
    )

    # Output
    verbose: bool = Field(default=False, description="Echo tmux commands to stderr")

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: str | None = Field(default=None, description="Log file path")

    @field_validator("fallback_name")
    @classmethod
    def _fallback_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("fallback_name must not be empty")
        return value.strip()

    @field_validator("dev_command")
    @classmethod
    def _dev_command_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("dev_command must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


def find_config_file(custom_path: str | None = None) -> Path | None:
    """Find configuration file in standard locations."""
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise ConfigurationError(
            f"Config file not found: {custom_path}", {"path": custom_path}
        )

    search_paths = [
        Path.cwd() / "tmuxdev.yaml",
        Path.cwd() / ".tmuxdev.yaml",
        Path.home() / ".config" / "tmuxdev" / "config.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a mapping, got {type(data).__name__}"
        )
    return data


def load_env_vars() -> dict[str, Any]:
    """Load configuration from TMUXDEV_* environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        f"{ENV_PREFIX}DEV_COMMAND": "dev_command",
        f"{ENV_PREFIX}LAUNCH_MODE": "launch_mode",
        f"{ENV_PREFIX}FALLBACK_NAME": "fallback_name",
        f"{ENV_PREFIX}VERBOSE": "verbose",
        f"{ENV_PREFIX}LOG_LEVEL": "log_level",
        f"{ENV_PREFIX}LOG_FILE": "log_file",
    }

    for env_var, config_key in env_mappings.items():
        if env_var in os.environ:
            env_value = os.environ[env_var]
            if config_key == "verbose":
                config[config_key] = env_value.lower() in ("true", "1", "yes", "on")
            else:
                config[config_key] = env_value

    return config


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> TmuxdevConfig:
    """Load configuration from file and environment variables.

    Precedence order (highest to lowest):
    1. CLI flag overrides
    2. Environment variables
    3. Configuration file
    4. Default values
    """
    config_data: dict[str, Any] = {}

    config_file = find_config_file(config_path)
    if config_file:
        logger.debug(f"Loading configuration from {config_file}")
        config_data.update(load_config_file(config_file))

    config_data.update(load_env_vars())

    if cli_overrides:
        config_data.update({k: v for k, v in cli_overrides.items() if v is not None})

    try:
        return TmuxdevConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
