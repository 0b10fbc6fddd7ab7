"""Runtime support library builds (libc++ and libc++abi).

Per target, the pipeline selects source files from a fixed catalog, derives
compiler flags, hands the compile units to a compilation engine and
registers the resulting static library with the caller's build session.
"""

from cxxforge.runtime.builder import (
    RuntimeLibraryBuilder,
    build_libcxx,
    build_libcxxabi,
    create_runtime_library_builder,
    resolve_compile_units,
)
from cxxforge.runtime.catalog import LIBCXX_CATALOG, LIBCXXABI_CATALOG, LibraryCatalog
from cxxforge.runtime.dispatcher import SubBuildDispatcher, static_lib_basename
from cxxforge.runtime.flags import FlagSynthesizer, create_flag_synthesizer
from cxxforge.runtime.library import (
    LIBCXX,
    LIBCXXABI,
    LIBRARIES,
    LibraryDescriptor,
    LibraryKind,
    get_library,
)
from cxxforge.runtime.protocols import ArtifactLockProtocol, CompilationEngineProtocol
from cxxforge.runtime.registry import ArtifactRegistry, Registration
from cxxforge.runtime.resolver import (
    ResolvedEntry,
    ResolvedSourceSet,
    SourceSetResolver,
    create_source_set_resolver,
)
from cxxforge.runtime.session import BuildSession
from cxxforge.runtime.verification import (
    CacheExemptionReport,
    verify_cache_exempt_flags,
)


__all__ = [
    "LIBCXX",
    "LIBCXXABI",
    "LIBCXXABI_CATALOG",
    "LIBCXX_CATALOG",
    "LIBRARIES",
    "ArtifactLockProtocol",
    "ArtifactRegistry",
    "BuildSession",
    "CacheExemptionReport",
    "CompilationEngineProtocol",
    "FlagSynthesizer",
    "LibraryCatalog",
    "LibraryDescriptor",
    "LibraryKind",
    "Registration",
    "ResolvedEntry",
    "ResolvedSourceSet",
    "RuntimeLibraryBuilder",
    "SourceSetResolver",
    "SubBuildDispatcher",
    "build_libcxx",
    "build_libcxxabi",
    "create_flag_synthesizer",
    "create_runtime_library_builder",
    "create_source_set_resolver",
    "get_library",
    "resolve_compile_units",
    "static_lib_basename",
    "verify_cache_exempt_flags",
]
