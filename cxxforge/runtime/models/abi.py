"""libc++ ABI version selection."""

from enum import IntEnum


class AbiVersion(IntEnum):
    """libc++ ABI version.

    Both runtime libraries of one session must be compiled with the same
    version, otherwise they are not link compatible.
    """

    V1 = 1
    V2 = 2

    @classmethod
    def default(cls) -> "AbiVersion":
        return cls.V1

    def version_define(self) -> str:
        return f"-D_LIBCPP_ABI_VERSION={int(self)}"

    def namespace_define(self) -> str:
        return f"-D_LIBCPP_ABI_NAMESPACE=__{int(self)}"

    def defines(self) -> tuple[str, str]:
        return (self.version_define(), self.namespace_define())
