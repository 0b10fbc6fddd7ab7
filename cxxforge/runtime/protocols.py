"""Runtime library build protocols."""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from cxxforge.runtime.models.units import SubBuildOutput, SubBuildRequest


@runtime_checkable
class ArtifactLockProtocol(Protocol):
    """Exclusivity lock held over a produced artifact file."""

    @property
    def path(self) -> Path:
        """Path of the locked file."""
        ...

    @property
    def held(self) -> bool:
        """Whether the lock is still held."""
        ...

    def release(self) -> None:
        """Release the lock. Releasing twice is a no-op."""
        ...


@runtime_checkable
class CompilationEngineProtocol(Protocol):
    """Independent compilation engine that runs a sub-build to completion."""

    def has_llvm(self) -> bool:
        """Check whether the LLVM code generation backend is available.

        Returns:
            bool: True if C++ sources can be compiled by this engine
        """
        ...

    def check_available(self) -> bool:
        """Check if the engine's tools can be executed on this host.

        Returns:
            bool: True if the engine is usable
        """
        ...

    def build(self, request: "SubBuildRequest") -> "SubBuildOutput":
        """Run a sub-build and block until it finishes.

        Args:
            request: Fully resolved sub-build request

        Returns:
            SubBuildOutput: Emitted artifact path and the lock over it

        Raises:
            SubBuildError: If any translation unit or the archive step fails
        """
        ...
