"""Target platform descriptor models."""

from enum import Enum

from pydantic import Field, field_validator

from cxxforge.core.errors import TargetError
from cxxforge.models.base import CxxforgeBaseModel


class Os(str, Enum):
    """Operating system tag of a compilation target."""

    FREESTANDING = "freestanding"
    LINUX = "linux"
    MACOS = "macos"
    IOS = "ios"
    WINDOWS = "windows"
    UEFI = "uefi"
    WASI = "wasi"
    EMSCRIPTEN = "emscripten"
    FREEBSD = "freebsd"
    NETBSD = "netbsd"
    OPENBSD = "openbsd"
    DRAGONFLY = "dragonfly"
    SOLARIS = "solaris"
    ILLUMOS = "illumos"
    ZOS = "zos"
    HAIKU = "haiku"
    FUCHSIA = "fuchsia"


class Abi(str, Enum):
    """ABI variant of a compilation target."""

    NONE = "none"
    GNU = "gnu"
    GNUABIN32 = "gnuabin32"
    GNUABI64 = "gnuabi64"
    GNUEABI = "gnueabi"
    GNUEABIHF = "gnueabihf"
    GNUF32 = "gnuf32"
    GNUSF = "gnusf"
    GNUX32 = "gnux32"
    GNUILP32 = "gnuilp32"
    MUSL = "musl"
    MUSLABIN32 = "muslabin32"
    MUSLABI64 = "muslabi64"
    MUSLEABI = "musleabi"
    MUSLEABIHF = "musleabihf"
    MUSLX32 = "muslx32"
    MSVC = "msvc"
    ANDROID = "android"
    EABI = "eabi"
    EABIHF = "eabihf"

    @property
    def is_gnu(self) -> bool:
        return self.value.startswith("gnu")

    @property
    def is_musl(self) -> bool:
        return self.value.startswith("musl")


SOLARISH_OSES = frozenset({Os.SOLARIS, Os.ILLUMOS})
NO_FPIC_OSES = frozenset({Os.WINDOWS, Os.UEFI})
NO_EXCEPTIONS_OSES = frozenset({Os.WASI})

# Used when a target string omits the ABI component
DEFAULT_ABIS: dict[Os, Abi] = {
    Os.LINUX: Abi.GNU,
    Os.WINDOWS: Abi.GNU,
    Os.WASI: Abi.MUSL,
}


class TargetDescriptor(CxxforgeBaseModel):
    """Target platform and threading mode for one build invocation.

    Immutable: the same descriptor is read by both library pipelines.
    """

    arch: str = Field(description="CPU architecture, e.g. x86_64 or wasm32")
    os: Os
    abi: Abi = Abi.NONE
    single_threaded: bool = False

    @field_validator("arch")
    @classmethod
    def validate_arch(cls, v: str) -> str:
        """Validate architecture name."""
        if not v:
            raise ValueError("Target architecture cannot be empty")
        return v.lower()

    @classmethod
    def parse(cls, triple: str, single_threaded: bool = False) -> "TargetDescriptor":
        """Parse an ``arch-os[-abi]`` target string.

        Raises:
            TargetError: If the string is malformed or names an unknown OS/ABI
        """
        parts = triple.strip().lower().split("-")
        if len(parts) not in (2, 3) or not all(parts):
            raise TargetError("Malformed target, expected arch-os[-abi]", target=triple)

        try:
            os_tag = Os(parts[1])
        except ValueError:
            raise TargetError("Unknown operating system", target=triple) from None

        if len(parts) == 3:
            try:
                abi = Abi(parts[2])
            except ValueError:
                raise TargetError("Unknown ABI", target=triple) from None
        else:
            abi = DEFAULT_ABIS.get(os_tag, Abi.NONE)

        return cls(arch=parts[0], os=os_tag, abi=abi, single_threaded=single_threaded)

    @property
    def triple(self) -> str:
        return f"{self.arch}-{self.os.value}-{self.abi.value}"

    @property
    def is_musl(self) -> bool:
        return self.abi.is_musl

    @property
    def is_gnu(self) -> bool:
        return self.abi.is_gnu

    @property
    def is_solarish(self) -> bool:
        return self.os in SOLARISH_OSES

    @property
    def is_wasm(self) -> bool:
        return self.arch in ("wasm32", "wasm64")

    @property
    def supports_fpic(self) -> bool:
        return self.os not in NO_FPIC_OSES

    @property
    def has_native_filesystem(self) -> bool:
        """Whether the C++ filesystem library can be built for this target."""
        if self.os is Os.WINDOWS and self.abi is Abi.MSVC:
            return False
        return self.os is not Os.WASI

    @property
    def has_exceptions(self) -> bool:
        return self.os not in NO_EXCEPTIONS_OSES

    def __str__(self) -> str:
        return self.triple
