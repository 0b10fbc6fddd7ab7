"""Compilation engines that run runtime library sub-builds.

The runtime pipeline only talks to ``CompilationEngineProtocol``; this
package provides the clang based implementation together with its cache
index and artifact locks.
"""

from typing import TYPE_CHECKING

from cxxforge.engine.cache import ArtifactIndex
from cxxforge.engine.cache_key import compute_cache_key
from cxxforge.engine.clang import (
    ClangCompilationEngine,
    clang_triple,
    codegen_flags,
    create_clang_engine,
)
from cxxforge.engine.lock import ArtifactLock


if TYPE_CHECKING:
    from cxxforge.config.user_config import UserConfig


def create_compilation_engine(
    user_config: "UserConfig | None" = None,
    use_cache: bool = True,
    jobs: int | None = None,
) -> ClangCompilationEngine:
    """Create a compilation engine configured from user settings.

    Args:
        user_config: User configuration providing compiler, archiver and jobs
        use_cache: Serve and store artifacts through the cache index
        jobs: Parallel compile jobs, overriding the configured value

    Returns:
        ClangCompilationEngine: Configured engine
    """
    if user_config is None:
        return create_clang_engine(use_cache=use_cache, jobs=jobs)

    return create_clang_engine(
        compiler=user_config.get("compiler"),
        archiver=user_config.get("archiver"),
        use_cache=use_cache,
        jobs=jobs or user_config.get("jobs"),
    )


__all__ = [
    "ArtifactIndex",
    "ArtifactLock",
    "ClangCompilationEngine",
    "clang_triple",
    "codegen_flags",
    "compute_cache_key",
    "create_clang_engine",
    "create_compilation_engine",
]
