"""Declarative source-set rules for the C++ runtime libraries.

Each rule pairs a target condition with effects. For every catalog entry the
active rules are applied in table order: the first matching ``Exclude`` drops
the entry and skips the rest of the table, while ``AddFlags`` effects
accumulate on entries that survive.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from cxxforge.runtime.models.target import Os, TargetDescriptor


class FlagPlacement(str, Enum):
    """Where rule flags land in the synthesized flag sequence."""

    # Before the library's fixed defines
    LEADING = "leading"
    # After the ABI, visibility and libc defines, before -fPIC
    TARGET = "target"


@dataclass(frozen=True)
class Exclude:
    """Drop catalog entries starting with any of the given prefixes."""

    prefixes: tuple[str, ...]

    def matches(self, source: str) -> bool:
        return source.startswith(self.prefixes)


@dataclass(frozen=True)
class AddFlags:
    """Add flags to every entry that survives the rule table."""

    flags: tuple[str, ...]
    placement: FlagPlacement = FlagPlacement.LEADING


Effect = Exclude | AddFlags


@dataclass(frozen=True)
class Rule:
    name: str
    condition: Callable[[TargetDescriptor], bool]
    effects: tuple[Effect, ...]
    description: str = ""

    def applies(self, target: TargetDescriptor) -> bool:
        return self.condition(target)


def lacks_native_filesystem(target: TargetDescriptor) -> bool:
    return not target.has_native_filesystem


def not_windows(target: TargetDescriptor) -> bool:
    return target.os is not Os.WINDOWS


def not_solarish(target: TargetDescriptor) -> bool:
    return not target.is_solarish


def not_zos(target: TargetDescriptor) -> bool:
    return target.os is not Os.ZOS


def is_zos(target: TargetDescriptor) -> bool:
    return target.os is Os.ZOS


def is_single_threaded(target: TargetDescriptor) -> bool:
    return target.single_threaded


def lacks_exceptions(target: TargetDescriptor) -> bool:
    return not target.has_exceptions


def multi_threaded_gnu(target: TargetDescriptor) -> bool:
    return not target.single_threaded and target.is_gnu


LIBCXX_RULES: tuple[Rule, ...] = (
    Rule(
        name="no-native-filesystem",
        condition=lacks_native_filesystem,
        effects=(Exclude(("src/filesystem/",)),),
        description="Filesystem library is unsupported on WASI and Windows MSVC",
    ),
    Rule(
        name="win32-support",
        condition=not_windows,
        effects=(Exclude(("src/support/win32/",)),),
    ),
    Rule(
        name="solaris-support",
        condition=not_solarish,
        effects=(Exclude(("src/support/solaris/",)),),
    ),
    Rule(
        name="ibm-support",
        condition=not_zos,
        effects=(Exclude(("src/support/ibm/",)),),
    ),
    Rule(
        name="single-threaded",
        condition=is_single_threaded,
        effects=(
            Exclude(("src/support/win32/thread_win32.cpp",)),
            AddFlags(("-D_LIBCPP_HAS_NO_THREADS",)),
        ),
    ),
    Rule(
        name="no-exceptions",
        condition=lacks_exceptions,
        effects=(AddFlags(("-fno-exceptions",), FlagPlacement.TARGET),),
        description="WASI has no exception handling support",
    ),
    Rule(
        name="no-aligned-allocation",
        condition=is_zos,
        effects=(AddFlags(("-fno-aligned-allocation",), FlagPlacement.TARGET),),
    ),
    Rule(
        name="aligned-allocation",
        condition=not_zos,
        effects=(AddFlags(("-faligned-allocation",), FlagPlacement.TARGET),),
    ),
)

LIBCXXABI_RULES: tuple[Rule, ...] = (
    Rule(
        name="no-exceptions",
        condition=lacks_exceptions,
        effects=(
            Exclude(("src/cxa_exception.cpp", "src/cxa_personality.cpp")),
            AddFlags(("-fno-exceptions",)),
        ),
        description="WASI has no exception handling support",
    ),
    Rule(
        name="single-threaded",
        condition=is_single_threaded,
        effects=(
            Exclude(("src/cxa_thread_atexit.cpp",)),
            AddFlags(("-D_LIBCXXABI_HAS_NO_THREADS", "-D_LIBCPP_HAS_NO_THREADS")),
        ),
    ),
    Rule(
        name="thread-atexit-impl",
        condition=multi_threaded_gnu,
        effects=(AddFlags(("-DHAVE___CXA_THREAD_ATEXIT_IMPL",)),),
        description="glibc provides __cxa_thread_atexit_impl",
    ),
)
