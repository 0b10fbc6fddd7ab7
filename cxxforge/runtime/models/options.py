"""Build options inherited from the caller's build session."""

from enum import Enum
from pathlib import Path

from pydantic import Field

from cxxforge.models.base import CxxforgeBaseModel
from cxxforge.runtime.models.target import Os, TargetDescriptor


class OptimizeMode(str, Enum):
    """Optimization mode of a build."""

    DEBUG = "Debug"
    RELEASE_SAFE = "ReleaseSafe"
    RELEASE_FAST = "ReleaseFast"
    RELEASE_SMALL = "ReleaseSmall"


class BuildOptions(CxxforgeBaseModel):
    """Options of the parent build that a runtime library sub-build inherits.

    Read-only for the pipelines; only PIC/PIE/LTO, TSan, red zone, frame
    pointer and function-sections settings are propagated verbatim.
    """

    optimize_mode: OptimizeMode = OptimizeMode.DEBUG
    strip: bool = False
    debug_runtime_libs: bool = Field(
        default=False,
        description="Build runtime libraries with the parent's optimize/strip settings",
    )
    pic: bool = False
    pie: bool = False
    lto: bool = False
    tsan: bool = False
    red_zone: bool = True
    omit_frame_pointer: bool = False
    function_sections: bool = False
    is_native_os: bool = False
    is_native_abi: bool = False
    libc_installation: Path | None = None
    verbose_cc: bool = False
    verbose_link: bool = False


def runtime_optimize_mode(options: BuildOptions, target: TargetDescriptor) -> OptimizeMode:
    """Optimize mode used for runtime support libraries.

    Runtime libraries are always optimized unless the caller explicitly asked
    to debug them; safety checks are dropped.
    """
    if options.debug_runtime_libs:
        return options.optimize_mode

    if options.optimize_mode in (OptimizeMode.DEBUG, OptimizeMode.RELEASE_SAFE):
        if target.is_wasm and target.os is Os.FREESTANDING:
            return OptimizeMode.RELEASE_SMALL
        return OptimizeMode.RELEASE_FAST
    return options.optimize_mode


def runtime_strip(options: BuildOptions) -> bool:
    """Whether runtime support libraries are stripped of debug info."""
    if options.debug_runtime_libs:
        return options.strip
    return True
