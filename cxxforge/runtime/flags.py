"""Compiler flag synthesis for resolved runtime library sources."""

import logging
from pathlib import Path

from cxxforge.runtime.library import LibraryDescriptor
from cxxforge.runtime.models.abi import AbiVersion
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.models.units import CompileUnit
from cxxforge.runtime.resolver import ResolvedEntry, ResolvedSourceSet


logger = logging.getLogger(__name__)

VISIBILITY_FLAGS = ("-fvisibility=hidden", "-fvisibility-inlines-hidden")
MUSL_DEFINE = "-D_LIBCPP_HAS_MUSL_LIBC"
PIC_FLAG = "-fPIC"


class FlagSynthesizer:
    """Build cache-relevant and cache-exempt flags for each resolved source.

    Cache-relevant flags are a function of (library, target, ABI version)
    only. Everything derived from the installation root goes to the
    cache-exempt group so relocating an installation keeps cache keys stable.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def cache_relevant_flags(
        self,
        library: LibraryDescriptor,
        entry: ResolvedEntry,
        target: TargetDescriptor,
        abi_version: AbiVersion,
    ) -> tuple[str, ...]:
        flags: list[str] = list(entry.leading_flags)
        flags.extend(library.fixed_defines)
        flags.extend(abi_version.defines())
        flags.extend(VISIBILITY_FLAGS)
        if target.is_musl:
            flags.append(MUSL_DEFINE)
        flags.extend(entry.target_flags)
        if target.supports_fpic:
            flags.append(PIC_FLAG)
        flags.extend(library.trailing_flags)
        return tuple(flags)

    def cache_exempt_flags(
        self, library: LibraryDescriptor, lib_directory: Path
    ) -> tuple[str, ...]:
        flags: list[str] = []
        for parts in library.include_dirs:
            flags.extend(["-I", str(lib_directory.joinpath(*parts))])
        return tuple(flags)

    def synthesize(
        self,
        resolved: ResolvedSourceSet,
        abi_version: AbiVersion,
        lib_directory: Path,
    ) -> list[CompileUnit]:
        """Turn a resolved source set into compile units.

        Args:
            resolved: Output of the source-set resolver
            abi_version: ABI version shared by both runtime libraries
            lib_directory: Installation root holding the library sources

        Returns:
            list[CompileUnit]: One unit per retained entry, in catalog order
        """
        library = resolved.library
        exempt = self.cache_exempt_flags(library, lib_directory)
        source_root = lib_directory / library.catalog.subdir

        units = [
            CompileUnit(
                src_path=source_root / entry.source,
                extra_flags=self.cache_relevant_flags(
                    library, entry, resolved.target, abi_version
                ),
                cache_exempt_flags=exempt,
                source_id=entry.source,
            )
            for entry in resolved.entries
        ]

        self.logger.debug(
            "Synthesized flags for %d %s units (ABI v%d)",
            len(units),
            library.task,
            int(abi_version),
        )
        return units


def create_flag_synthesizer() -> FlagSynthesizer:
    return FlagSynthesizer()
