"""Caller-side build session state."""

from concurrent.futures import Executor
from dataclasses import dataclass, field
from pathlib import Path

from cxxforge.runtime.models.abi import AbiVersion
from cxxforge.runtime.models.options import BuildOptions
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.registry import ArtifactRegistry


@dataclass
class BuildSession:
    """State of the parent build that runtime library pipelines read from.

    Attributes:
        target: Target platform and threading mode
        lib_directory: Installation root containing libcxx/ and libcxxabi/
        global_cache_directory: Cache directory shared with the sub-builds
        options: Build options inherited by sub-builds
        abi_version: libc++ ABI version used by both libraries
        thread_pool: Executor the engine may fan translation units out on
        registry: Slots receiving the built artifacts
    """

    target: TargetDescriptor
    lib_directory: Path
    global_cache_directory: Path
    options: BuildOptions = field(default_factory=BuildOptions)
    abi_version: AbiVersion = field(default_factory=AbiVersion.default)
    thread_pool: Executor | None = None
    registry: ArtifactRegistry = field(default_factory=ArtifactRegistry)

    def close(self) -> None:
        """Release every artifact lock still held by the session."""
        self.registry.release_all()
