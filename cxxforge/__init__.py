"""cxxforge - libc++ and libc++abi runtime library builder."""

from importlib.metadata import PackageNotFoundError, distribution

from .runtime import (
    BuildSession,
    build_libcxx,
    build_libcxxabi,
    resolve_compile_units,
)
from .runtime.models import AbiVersion, BuildOptions, TargetDescriptor


try:
    __version__ = distribution(__package__ or "cxxforge").version
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AbiVersion",
    "BuildOptions",
    "BuildSession",
    "TargetDescriptor",
    "__version__",
    "build_libcxx",
    "build_libcxxabi",
    "resolve_compile_units",
]

# Import CLI after setting __version__ to avoid circular imports
from .cli import app, main


__all__ += ["app", "main"]
