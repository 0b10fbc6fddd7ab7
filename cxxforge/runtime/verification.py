"""Check that cache-exempt flags do not change the produced artifact.

Include directories are kept out of the cache key because they only depend
on where the runtime library sources are installed. This module builds a
library from two installation roots and compares the archive members.
"""

import hashlib
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path

from cxxforge.core.errors import BuildError
from cxxforge.core.structlog_logger import get_struct_logger_with_context
from cxxforge.runtime.builder import create_runtime_library_builder
from cxxforge.runtime.library import LibraryDescriptor, LibraryKind, get_library
from cxxforge.runtime.protocols import CompilationEngineProtocol
from cxxforge.runtime.registry import ArtifactRegistry
from cxxforge.runtime.session import BuildSession


AR_MAGIC = b"!<arch>\n"
AR_HEADER_SIZE = 60


@dataclass
class CacheExemptionReport:
    """Outcome of building one library from two installation roots."""

    library: str
    roots: tuple[Path, Path]
    digests: dict[str, dict[str, str]] = field(default_factory=dict)
    differing_members: list[str] = field(default_factory=list)

    @property
    def matching(self) -> bool:
        return not self.differing_members


def archive_member_digests(archive_path: Path) -> dict[str, str]:
    """SHA-256 of every member of a ``!<arch>`` static library.

    The archive symbol table and GNU name table are skipped; long member
    names are resolved through the name table. Members sharing a name (objects
    of same-named sources in different directories) are kept apart: the first
    keeps its name, later ones are keyed ``name#2``, ``name#3`` and so on.

    Raises:
        BuildError: If the file is not an ar archive
    """
    data = archive_path.read_bytes()
    if not data.startswith(AR_MAGIC):
        raise BuildError(f"Not an ar archive: {archive_path}")

    digests: dict[str, str] = {}
    occurrences: dict[str, int] = {}
    name_table = b""
    offset = len(AR_MAGIC)
    while offset + AR_HEADER_SIZE <= len(data):
        header = data[offset : offset + AR_HEADER_SIZE]
        raw_name = header[:16].decode("ascii").rstrip()
        size = int(header[48:58].decode("ascii").strip())
        body_start = offset + AR_HEADER_SIZE
        body = data[body_start : body_start + size]
        # Members are 2-byte aligned
        offset = body_start + size + (size % 2)

        if raw_name in ("/", "/SYM64/", "__.SYMDEF", "__.SYMDEF SORTED"):
            continue
        if raw_name == "//":
            name_table = body
            continue

        if raw_name.startswith("#1/"):
            # BSD long name stored at the start of the body
            name_length = int(raw_name[3:])
            name = body[:name_length].rstrip(b"\0").decode()
            body = body[name_length:]
        elif raw_name.startswith("/") and raw_name[1:].isdigit():
            start = int(raw_name[1:])
            end = name_table.index(b"/\n", start)
            name = name_table[start:end].decode()
        else:
            name = raw_name.rstrip("/")

        occurrences[name] = occurrences.get(name, 0) + 1
        if occurrences[name] > 1:
            name = f"{name}#{occurrences[name]}"
        digests[name] = hashlib.sha256(body).hexdigest()
    return digests


def verify_cache_exempt_flags(
    session: BuildSession,
    library: LibraryDescriptor | LibraryKind | str,
    engine: CompilationEngineProtocol,
    alternate_root: Path,
) -> CacheExemptionReport:
    """Build library from the session's root and from alternate_root.

    Each build runs in its own throwaway cache directory so neither can be
    served from the other's output. The session's own registry is left
    untouched.

    Args:
        session: Session supplying target, options and the primary root
        library: Library descriptor, kind or name
        engine: Compilation engine used for both builds
        alternate_root: Second installation root with identical sources

    Returns:
        CacheExemptionReport: Member digests per root and the members that differ
    """
    if not isinstance(library, LibraryDescriptor):
        library = get_library(library)

    builder = create_runtime_library_builder(engine)
    roots = (session.lib_directory, alternate_root)
    report = CacheExemptionReport(library=library.root_name, roots=roots)

    with tempfile.TemporaryDirectory(prefix="cxxforge-verify-") as tmp:
        for index, root in enumerate(roots):
            probe = replace(
                session,
                lib_directory=root,
                global_cache_directory=Path(tmp) / f"root{index}",
                registry=ArtifactRegistry(),
            )
            try:
                registration = builder.build(probe, library)
                report.digests[str(root)] = archive_member_digests(
                    registration.artifact.full_object_path
                )
            finally:
                probe.close()

    first, second = (report.digests[str(root)] for root in roots)
    report.differing_members = sorted(
        name
        for name in first.keys() | second.keys()
        if first.get(name) != second.get(name)
    )

    log = get_struct_logger_with_context(__name__, library=library.root_name)
    log.info(
        "cache_exemption_verified",
        matching=report.matching,
        differing=len(report.differing_members),
    )
    return report
