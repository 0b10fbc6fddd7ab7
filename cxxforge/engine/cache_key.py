"""Content-based cache keys for runtime library sub-builds."""

import hashlib
import json
from pathlib import Path
from typing import Any

from cxxforge.runtime.models.units import SubBuildRequest


def digest_file(path: Path) -> str:
    """SHA-256 of a file's contents."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            h.update(chunk)
    return h.hexdigest()


def include_dirs_from_flags(flags: tuple[str, ...]) -> list[Path]:
    """Directories named by ``-I <dir>`` pairs."""
    dirs: list[Path] = []
    it = iter(flags)
    for flag in it:
        if flag == "-I":
            value = next(it, None)
            if value is not None:
                dirs.append(Path(value))
        elif flag.startswith("-I") and len(flag) > 2:
            dirs.append(Path(flag[2:]))
    return dirs


def digest_tree(root: Path) -> str:
    """Digest of every file below root, keyed by relative path.

    Absolute locations do not enter the digest, so the same headers installed
    under a different prefix produce the same value.
    """
    h = hashlib.sha256()
    if root.is_dir():
        for path in sorted(p for p in root.rglob("*") if p.is_file()):
            h.update(path.relative_to(root).as_posix().encode())
            h.update(b"\0")
            h.update(digest_file(path).encode())
    return h.hexdigest()


def from_dict(data: dict[str, Any]) -> str:
    """Hash a JSON-compatible dictionary with sorted keys."""
    sorted_json = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(sorted_json.encode()).hexdigest()


def compute_cache_key(request: SubBuildRequest, engine_id: str) -> str:
    """Cache key over the cache-relevant inputs of a request.

    Covers the request's cache inputs, the content of every source file and
    of every include directory, and the engine identity. Cache-exempt flags
    only contribute the content of the directories they point to.
    """
    sources = {
        unit.source_id: digest_file(unit.src_path) for unit in request.compile_units
    }

    include_digests: list[str] = []
    seen: set[Path] = set()
    for unit in request.compile_units:
        for include_dir in include_dirs_from_flags(unit.cache_exempt_flags):
            if include_dir in seen:
                continue
            seen.add(include_dir)
            include_digests.append(digest_tree(include_dir))

    return from_dict(
        {
            "engine": engine_id,
            "inputs": request.cache_inputs(),
            "sources": sources,
            "includes": include_digests,
        }
    )[:32]
