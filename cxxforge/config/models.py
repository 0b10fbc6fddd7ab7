"""User configuration models."""

import os
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cxxforge.runtime.models.abi import AbiVersion


def _default_cache_path() -> Path:
    if "XDG_CACHE_HOME" in os.environ:
        return Path(os.environ["XDG_CACHE_HOME"]) / "cxxforge"
    return Path.home() / ".cache" / "cxxforge"


class UserConfigData(BaseSettings):
    """User configuration data model with automatic environment variable support.

    Precedence order (highest to lowest):
    1. Environment variables
    2. Constructor arguments (file data)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CXXFORGE_",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment variables override file configuration."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )

    lib_directory: Path | None = Field(
        default=None,
        description="Installation root containing the libcxx/ and libcxxabi/ sources",
    )

    cache_path: Path = Field(
        default_factory=_default_cache_path,
        description="Global cache directory for runtime library sub-builds",
    )

    log_level: str = "WARNING"

    abi_version: int = Field(
        default=int(AbiVersion.default()),
        description="libc++ ABI version used for both runtime libraries",
    )

    jobs: int | None = Field(
        default=None,
        description="Parallel compile jobs (defaults to the CPU count)",
    )

    compiler: str = "clang++"
    archiver: str = "llvm-ar"
    verbose_cc: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v

    @field_validator("abi_version")
    @classmethod
    def validate_abi_version(cls, v: int) -> int:
        supported = [int(version) for version in AbiVersion]
        if v not in supported:
            raise ValueError(f"ABI version must be one of {supported}")
        return v

    @field_validator("jobs")
    @classmethod
    def validate_jobs(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("jobs must be at least 1")
        return v

    @field_validator("lib_directory", "cache_path", mode="after")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None
