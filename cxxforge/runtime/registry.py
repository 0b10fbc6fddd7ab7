"""Once-only registry for built runtime library artifacts."""

import logging
from dataclasses import dataclass

from cxxforge.core.errors import ArtifactAlreadyRegisteredError
from cxxforge.runtime.library import LibraryKind
from cxxforge.runtime.models.units import BuiltArtifact


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    """Proof that an artifact now occupies a library slot."""

    slot: LibraryKind
    artifact: BuiltArtifact


class ArtifactRegistry:
    """Caller-owned slots holding at most one artifact per runtime library.

    Not thread-safe: each slot has a single producer per build session, and a
    second registration raises ``ArtifactAlreadyRegisteredError``.
    """

    def __init__(self) -> None:
        self._slots: dict[LibraryKind, BuiltArtifact] = {}

    def register(self, slot: LibraryKind, artifact: BuiltArtifact) -> Registration:
        """Store an artifact in an empty slot.

        Raises:
            ArtifactAlreadyRegisteredError: If the slot already holds an artifact
        """
        if slot in self._slots:
            raise ArtifactAlreadyRegisteredError(slot.value)
        self._slots[slot] = artifact
        logger.debug("Registered %s artifact at %s", slot.value, artifact.full_object_path)
        return Registration(slot=slot, artifact=artifact)

    def get(self, slot: LibraryKind) -> BuiltArtifact | None:
        return self._slots.get(slot)

    def is_registered(self, slot: LibraryKind) -> bool:
        return slot in self._slots

    def take(self, slot: LibraryKind) -> BuiltArtifact | None:
        """Hand an artifact (and its lock) over to the caller, emptying the slot."""
        return self._slots.pop(slot, None)

    def release_all(self) -> int:
        """Release the locks of all registered artifacts and clear the slots.

        Returns:
            Number of artifacts released
        """
        released = 0
        for slot, artifact in list(self._slots.items()):
            artifact.release()
            del self._slots[slot]
            released += 1
        if released:
            logger.debug("Released %d runtime library artifacts", released)
        return released

    def __len__(self) -> int:
        return len(self._slots)
