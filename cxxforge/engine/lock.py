"""File locks guarding cached build outputs."""

import fcntl
import logging
import time
from pathlib import Path
from typing import IO, Any


logger = logging.getLogger(__name__)


class ArtifactLock:
    """``flock`` based lock on a cache directory's lock file.

    Shared locks are handed to callers holding a built artifact; the engine
    takes an exclusive lock while it produces the artifact.
    """

    def __init__(self, path: Path, handle: IO[str], exclusive: bool) -> None:
        self._path = path
        self._handle: IO[str] | None = handle
        self.exclusive = exclusive

    @classmethod
    def acquire(
        cls,
        path: Path,
        exclusive: bool = False,
        timeout: float = 30.0,
        poll_interval: float = 0.01,
    ) -> "ArtifactLock":
        """Acquire a lock on path, creating the lock file if needed.

        Raises:
            TimeoutError: If the lock is not obtained within timeout seconds
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = path.open("a", encoding="utf-8")
        lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH

        start_time = time.time()
        while True:
            try:
                fcntl.flock(handle.fileno(), lock_type | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.time() - start_time > timeout:
                    handle.close()
                    raise TimeoutError(f"Timed out waiting for lock on {path}") from None
                time.sleep(poll_interval)

        logger.debug("Acquired %s lock on %s", "exclusive" if exclusive else "shared", path)
        return cls(path, handle, exclusive)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._handle is not None

    def downgrade(self) -> None:
        """Turn a held exclusive lock into a shared one without releasing it."""
        if self._handle is None or not self.exclusive:
            return
        fcntl.flock(self._handle.fileno(), fcntl.LOCK_SH)
        self.exclusive = False
        logger.debug("Downgraded lock on %s to shared", self._path)

    def release(self) -> None:
        if self._handle is None:
            return
        try:
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None
        logger.debug("Released lock on %s", self._path)

    def __enter__(self) -> "ArtifactLock":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "held" if self.held else "released"
        return f"ArtifactLock({self._path}, {state})"
