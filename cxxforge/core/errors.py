"""Error hierarchy for cxxforge."""

from typing import Any


class CxxforgeError(Exception):
    """Base error for all cxxforge failures."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in sorted(self.context.items()))
        return f"{self.message} ({details})"


class ConfigError(CxxforgeError):
    """Invalid or unreadable configuration."""


class TargetError(ConfigError):
    """Target description could not be parsed or is not supported."""


class BuildError(CxxforgeError):
    """Base class for errors raised while building a runtime library."""


class UnsupportedBuildConfigurationError(BuildError):
    """The compilation engine lacks the LLVM code generation backend.

    Raised before any source-set resolution work is attempted.
    """


class SubBuildError(BuildError):
    """A delegated sub-build failed.

    The whole library build fails as a unit; the engine's messages are kept
    verbatim in ``errors``.
    """

    def __init__(
        self,
        message: str,
        task: str | None = None,
        errors: list[str] | None = None,
        **context: Any,
    ) -> None:
        if task is not None:
            context["task"] = task
        super().__init__(message, **context)
        self.task = task
        self.errors = list(errors or [])


class ArtifactAlreadyRegisteredError(CxxforgeError):
    """A second artifact was registered for a library slot that is occupied.

    Correct callers build each library at most once per session, so this is a
    programming defect rather than a user-facing build failure.
    """

    def __init__(self, slot: str) -> None:
        super().__init__("Artifact already registered for library", slot=slot)
        self.slot = slot


__all__ = [
    "CxxforgeError",
    "ConfigError",
    "TargetError",
    "BuildError",
    "UnsupportedBuildConfigurationError",
    "SubBuildError",
    "ArtifactAlreadyRegisteredError",
]
