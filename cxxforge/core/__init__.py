from .errors import (
    ArtifactAlreadyRegisteredError,
    BuildError,
    ConfigError,
    CxxforgeError,
    SubBuildError,
    TargetError,
    UnsupportedBuildConfigurationError,
)
from .logging import get_logger, setup_logging


__all__ = [
    "setup_logging",
    "get_logger",
    "CxxforgeError",
    "ConfigError",
    "TargetError",
    "BuildError",
    "UnsupportedBuildConfigurationError",
    "SubBuildError",
    "ArtifactAlreadyRegisteredError",
]
