"""Library descriptors parameterizing the generic runtime library pipeline."""

from dataclasses import dataclass
from enum import Enum

from cxxforge.core.errors import ConfigError
from cxxforge.runtime.catalog import LIBCXX_CATALOG, LIBCXXABI_CATALOG, LibraryCatalog
from cxxforge.runtime.rules import LIBCXX_RULES, LIBCXXABI_RULES, Rule


class LibraryKind(str, Enum):
    """Runtime library slot, named after the library's root name."""

    LIBCXX = "c++"
    LIBCXXABI = "c++abi"


# Include directories relative to the installation root
CXX_INCLUDE = ("libcxx", "include")
CXXABI_INCLUDE = ("libcxxabi", "include")
CXX_SRC_INCLUDE = ("libcxx", "src")


@dataclass(frozen=True)
class LibraryDescriptor:
    """Everything that differs between the two runtime library builds."""

    kind: LibraryKind
    task: str
    catalog: LibraryCatalog
    rules: tuple[Rule, ...]
    fixed_defines: tuple[str, ...]
    trailing_flags: tuple[str, ...]
    include_dirs: tuple[tuple[str, ...], ...]

    @property
    def root_name(self) -> str:
        return self.kind.value


LIBCXX = LibraryDescriptor(
    kind=LibraryKind.LIBCXX,
    task="libcxx",
    catalog=LIBCXX_CATALOG,
    rules=LIBCXX_RULES,
    fixed_defines=(
        "-DNDEBUG",
        "-D_LIBCPP_BUILDING_LIBRARY",
        "-D_LIBCPP_HAS_NO_PRAGMA_SYSTEM_HEADER",
        "-DLIBCXX_BUILDING_LIBCXXABI",
        "-D_LIBCXXABI_DISABLE_VISIBILITY_ANNOTATIONS",
        "-D_LIBCPP_DISABLE_VISIBILITY_ANNOTATIONS",
        "-D_LIBCPP_DISABLE_NEW_DELETE_DEFINITIONS",
        "-D_LIBCPP_HAS_NO_VENDOR_AVAILABILITY_ANNOTATIONS",
        # Serial parallel-algorithm backend; must match libc++abi
        "-D_LIBCPP_PSTL_CPU_BACKEND_SERIAL",
    ),
    trailing_flags=("-nostdinc++", "-std=c++20", "-Wno-user-defined-literals"),
    include_dirs=(CXX_INCLUDE, CXXABI_INCLUDE, CXX_SRC_INCLUDE),
)

LIBCXXABI = LibraryDescriptor(
    kind=LibraryKind.LIBCXXABI,
    task="libcxxabi",
    catalog=LIBCXXABI_CATALOG,
    rules=LIBCXXABI_RULES,
    fixed_defines=(
        "-D_LIBCPP_DISABLE_EXTERN_TEMPLATE",
        "-D_LIBCPP_ENABLE_CXX17_REMOVED_UNEXPECTED_FUNCTIONS",
        "-D_LIBCXXABI_BUILDING_LIBRARY",
        "-D_LIBCXXABI_DISABLE_VISIBILITY_ANNOTATIONS",
        "-D_LIBCPP_DISABLE_VISIBILITY_ANNOTATIONS",
        "-D_LIBCPP_PSTL_CPU_BACKEND_SERIAL",
    ),
    trailing_flags=(
        "-nostdinc++",
        "-fstrict-aliasing",
        "-funwind-tables",
        "-std=c++20",
    ),
    include_dirs=(CXXABI_INCLUDE, CXX_INCLUDE, CXX_SRC_INCLUDE),
)

LIBRARIES: dict[LibraryKind, LibraryDescriptor] = {
    LibraryKind.LIBCXX: LIBCXX,
    LibraryKind.LIBCXXABI: LIBCXXABI,
}

_ALIASES = {
    "c++": LibraryKind.LIBCXX,
    "libc++": LibraryKind.LIBCXX,
    "libcxx": LibraryKind.LIBCXX,
    "c++abi": LibraryKind.LIBCXXABI,
    "libc++abi": LibraryKind.LIBCXXABI,
    "libcxxabi": LibraryKind.LIBCXXABI,
}


def get_library(name: "str | LibraryKind") -> LibraryDescriptor:
    """Look up a library descriptor by kind, root name or task name.

    Raises:
        ConfigError: If the name does not denote a runtime library
    """
    if isinstance(name, LibraryKind):
        return LIBRARIES[name]
    kind = _ALIASES.get(name.strip().lower())
    if kind is None:
        raise ConfigError(
            f"Unknown runtime library: {name}. Supported libraries: c++, c++abi"
        )
    return LIBRARIES[kind]
