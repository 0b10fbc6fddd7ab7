"""DiskCache-backed index of built runtime library artifacts."""

import logging
import time
from pathlib import Path
from typing import Any

import diskcache  # type: ignore[import-untyped]


class ArtifactIndex:
    """Maps sub-build cache keys to the manifests of produced artifacts.

    DiskCache provides SQLite-backed persistent storage with its own
    concurrency control, so several engines may share one index.
    """

    def __init__(self, cache_path: Path, timeout: float = 60.0) -> None:
        self.cache_path = Path(cache_path)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.cache_path.mkdir(parents=True, exist_ok=True)
        self._cache = diskcache.Cache(directory=str(self.cache_path), timeout=timeout)
        self.hit_count = 0
        self.miss_count = 0
        self.logger.debug("Artifact index initialized at %s", self.cache_path)

    def lookup(self, key: str) -> Path | None:
        """Return the artifact path for key if it is indexed and still on disk."""
        manifest = self._cache.get(key)
        if manifest is None:
            self.miss_count += 1
            self.logger.debug("Cache miss for key: %s", key)
            return None

        emit_path = Path(manifest["emit_path"])
        if not emit_path.is_file():
            self.miss_count += 1
            self.logger.debug("Stale cache entry for key %s, artifact missing", key)
            self._cache.delete(key)
            return None

        self.hit_count += 1
        self.logger.debug("Cache hit for key: %s", key)
        return emit_path

    def store(self, key: str, emit_path: Path, task: str, unit_count: int) -> None:
        self._cache.set(
            key,
            {
                "emit_path": str(emit_path),
                "task": task,
                "unit_count": unit_count,
                "created_at": time.time(),
            },
        )
        self.logger.debug("Indexed %s artifact under key %s", task, key)

    def forget(self, key: str) -> bool:
        result: bool = self._cache.delete(key)
        return result

    def manifest(self, key: str) -> dict[str, Any] | None:
        manifest: dict[str, Any] | None = self._cache.get(key)
        return manifest

    def keys(self) -> list[str]:
        return list(self._cache.iterkeys())

    def close(self) -> None:
        self._cache.close()

    def __enter__(self) -> "ArtifactIndex":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
