"""Compile unit, sub-build request and artifact models."""

from concurrent.futures import Executor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ConfigDict, Field

from cxxforge.models.base import CxxforgeBaseModel
from cxxforge.runtime.models.options import OptimizeMode
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.protocols import ArtifactLockProtocol


class OutputMode(str, Enum):
    LIB = "lib"
    EXE = "exe"
    OBJ = "obj"


class LinkMode(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


class CacheMode(str, Enum):
    """How the engine caches a sub-build.

    ``whole`` keys the entire output on all cache-relevant inputs at once.
    """

    WHOLE = "whole"
    INCREMENTAL = "incremental"


@dataclass(frozen=True)
class CompileUnit:
    """One translation unit with its resolved flags.

    Attributes:
        src_path: Absolute path of the source file
        extra_flags: Flags that affect the object output and take part in the
            cache key
        cache_exempt_flags: Installation dependent flags kept out of the cache key
        source_id: Catalog identifier of the source, e.g. ``src/any.cpp``
    """

    src_path: Path
    extra_flags: tuple[str, ...]
    cache_exempt_flags: tuple[str, ...] = ()
    source_id: str = ""

    @property
    def all_flags(self) -> tuple[str, ...]:
        return self.extra_flags + self.cache_exempt_flags


class SubBuildRequest(CxxforgeBaseModel):
    """Self-contained request for one runtime library sub-build."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    task: str = Field(description="Task name used in progress and errors, e.g. libcxx")
    root_name: str
    target: TargetDescriptor
    output_mode: OutputMode = OutputMode.LIB
    link_mode: LinkMode = LinkMode.STATIC
    emit_basename: str
    compile_units: tuple[CompileUnit, ...]

    lib_directory: Path
    global_cache_directory: Path
    local_cache_directory: Path
    cache_mode: CacheMode = CacheMode.WHOLE

    optimize_mode: OptimizeMode
    strip: bool

    # Runtime libraries are never instrumented or hardened
    want_sanitize_c: bool = False
    want_stack_check: bool = False
    want_stack_protector: int = 0
    want_valgrind: bool = False

    want_red_zone: bool = True
    omit_frame_pointer: bool = False
    want_tsan: bool = False
    want_pic: bool = False
    want_pie: bool = False
    want_lto: bool = False
    function_sections: bool = False

    is_native_os: bool = False
    is_native_abi: bool = False
    libc_installation: Path | None = None
    link_libc: bool = True
    skip_linker_dependencies: bool = True

    verbose_cc: bool = False
    verbose_link: bool = False

    thread_pool: Executor | None = Field(default=None, exclude=True)

    def cache_inputs(self) -> dict[str, Any]:
        """Inputs that determine the produced artifact bit-for-bit.

        Installation paths, cache directories, the thread pool and
        cache-exempt flags are left out. The libc sysroot stays in: it selects
        the libc headers every unit compiles against.
        """
        return {
            "root_name": self.root_name,
            "target": self.target.triple,
            "single_threaded": self.target.single_threaded,
            "output_mode": self.output_mode.value,
            "link_mode": self.link_mode.value,
            "emit_basename": self.emit_basename,
            "optimize_mode": self.optimize_mode.value,
            "strip": self.strip,
            "want_sanitize_c": self.want_sanitize_c,
            "want_stack_check": self.want_stack_check,
            "want_stack_protector": self.want_stack_protector,
            "want_valgrind": self.want_valgrind,
            "want_red_zone": self.want_red_zone,
            "omit_frame_pointer": self.omit_frame_pointer,
            "want_tsan": self.want_tsan,
            "want_pic": self.want_pic,
            "want_pie": self.want_pie,
            "want_lto": self.want_lto,
            "function_sections": self.function_sections,
            "link_libc": self.link_libc,
            "libc_installation": (
                str(self.libc_installation) if self.libc_installation else None
            ),
            "units": [
                {"source": unit.source_id, "flags": list(unit.extra_flags)}
                for unit in self.compile_units
            ],
        }


@dataclass(frozen=True)
class SubBuildOutput:
    """What a compilation engine hands back on success."""

    emit_path: Path
    lock: ArtifactLockProtocol
    cache_hit: bool = False
    messages: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BuiltArtifact:
    """Static library produced by a sub-build, ready for the link step.

    The lock is owned by whoever holds the artifact and must be released
    eventually.
    """

    full_object_path: Path
    lock: ArtifactLockProtocol

    def release(self) -> None:
        self.lock.release()
