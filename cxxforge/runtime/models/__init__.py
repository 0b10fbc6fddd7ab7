"""Runtime library build models."""

from .abi import AbiVersion
from .options import BuildOptions, OptimizeMode, runtime_optimize_mode, runtime_strip
from .target import Abi, Os, TargetDescriptor
from .units import (
    BuiltArtifact,
    CacheMode,
    CompileUnit,
    LinkMode,
    OutputMode,
    SubBuildOutput,
    SubBuildRequest,
)


__all__ = [
    "Abi",
    "AbiVersion",
    "BuildOptions",
    "BuiltArtifact",
    "CacheMode",
    "CompileUnit",
    "LinkMode",
    "OptimizeMode",
    "Os",
    "OutputMode",
    "SubBuildOutput",
    "SubBuildRequest",
    "TargetDescriptor",
    "runtime_optimize_mode",
    "runtime_strip",
]
