"""
User configuration management for cxxforge.

Settings come from several sources:
1. Environment variables (highest precedence)
2. Command-line provided config file
3. Config file in current directory
4. User's XDG config directory
5. Default values (lowest precedence)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cxxforge.config.models import UserConfigData
from cxxforge.core.errors import ConfigError
from cxxforge.runtime.models.abi import AbiVersion


logger = logging.getLogger(__name__)

ENV_PREFIX = "CXXFORGE_"


class UserConfig:
    """Manages user-specific configuration using Pydantic Settings."""

    def __init__(self, cli_config_path: str | Path | None = None):
        """
        Initialize the user configuration handler.

        Args:
            cli_config_path: Optional config file path provided via CLI
        """
        self._config_sources: dict[str, str] = {}
        self._main_config_path: Path | None = None
        self._cli_config_path = (
            Path(cli_config_path).expanduser().resolve() if cli_config_path else None
        )
        self._config_paths = self._generate_config_paths()
        self._load_config()

    def _generate_config_paths(self) -> list[Path]:
        """Generate a list of config paths to search in order of precedence."""
        config_paths = []

        if self._cli_config_path:
            config_paths.append(self._cli_config_path)

        config_paths.extend([Path.cwd() / "cxxforge.yaml", Path.cwd() / ".cxxforge.yml"])

        xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
        config_root = (
            Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
        )
        config_paths.append(config_root / "cxxforge" / "config.yaml")

        return config_paths

    def _read_config_file(self, path: Path) -> dict[str, Any]:
        try:
            with path.open(encoding="utf-8") as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        if raw_config is None:
            return {}
        if not isinstance(raw_config, dict):
            raise ConfigError(f"Invalid config file format: {path}")
        return raw_config

    def _search_config_files(self) -> tuple[dict[str, Any], Path | None]:
        if self._cli_config_path and not self._cli_config_path.is_file():
            raise ConfigError(f"Config file not found: {self._cli_config_path}")

        for path in self._config_paths:
            if path.is_file():
                return self._read_config_file(path), path
        return {}, None

    def _load_config(self) -> None:
        """Load configuration from config files and environment variables."""
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Config search paths: %s", [str(p) for p in self._config_paths]
            )

        config_data, found_path = self._search_config_files()

        try:
            self._config = UserConfigData(**config_data)
        except ValidationError as e:
            source = found_path or "environment"
            raise ConfigError(f"Invalid configuration in {source}: {e}") from e

        if found_path:
            logger.debug("Loaded user configuration from %s", found_path)
            self._main_config_path = found_path
            for key in config_data:
                self._config_sources[key] = f"file:{found_path.name}"
        else:
            logger.debug(
                "No user configuration files found. Using defaults with environment variables."
            )

        for env_name in os.environ:
            if not env_name.startswith(ENV_PREFIX):
                continue
            config_key = env_name[len(ENV_PREFIX) :].lower()
            if config_key in UserConfigData.model_fields:
                self._config_sources[config_key] = "environment"

    @property
    def config_path(self) -> Path | None:
        return self._main_config_path

    def get_source(self, key: str) -> str:
        """
        Get the source of a configuration value.

        Returns:
            The source of the configuration value (environment, file:name, default)
        """
        return self._config_sources.get(key, "default")

    def get(self, key: str, default: Any = None) -> Any:
        if hasattr(self._config, key):
            return getattr(self._config, key)
        return default

    def get_abi_version(self) -> AbiVersion:
        return AbiVersion(self._config.abi_version)


def create_user_config(cli_config_path: str | Path | None = None) -> UserConfig:
    """
    Create a UserConfig instance.

    Args:
        cli_config_path: Optional config file path provided via CLI

    Returns:
        Configured UserConfig instance

    Raises:
        ConfigError: If a config file cannot be read or fails validation
    """
    return UserConfig(cli_config_path=cli_config_path)
