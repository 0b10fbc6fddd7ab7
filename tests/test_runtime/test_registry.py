"""Tests for the once-only artifact registry."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from cxxforge.core.errors import ArtifactAlreadyRegisteredError
from cxxforge.runtime.library import LibraryKind
from cxxforge.runtime.models.units import BuiltArtifact
from cxxforge.runtime.protocols import ArtifactLockProtocol
from cxxforge.runtime.registry import ArtifactRegistry


def make_artifact(name: str) -> BuiltArtifact:
    return BuiltArtifact(
        full_object_path=Path("/cache/o/key") / name,
        lock=Mock(spec=ArtifactLockProtocol),
    )


class TestArtifactRegistry:
    def test_register_returns_registration(self):
        registry = ArtifactRegistry()
        artifact = make_artifact("libc++.a")

        registration = registry.register(LibraryKind.LIBCXX, artifact)

        assert registration.slot is LibraryKind.LIBCXX
        assert registration.artifact is artifact
        assert registry.get(LibraryKind.LIBCXX) is artifact
        assert registry.is_registered(LibraryKind.LIBCXX)
        assert not registry.is_registered(LibraryKind.LIBCXXABI)

    def test_second_registration_raises(self):
        registry = ArtifactRegistry()
        first = make_artifact("libc++.a")
        registry.register(LibraryKind.LIBCXX, first)

        with pytest.raises(ArtifactAlreadyRegisteredError) as exc_info:
            registry.register(LibraryKind.LIBCXX, make_artifact("libc++.a"))

        assert exc_info.value.slot == "c++"
        assert registry.get(LibraryKind.LIBCXX) is first

    def test_slots_are_independent(self):
        registry = ArtifactRegistry()
        registry.register(LibraryKind.LIBCXX, make_artifact("libc++.a"))
        registry.register(LibraryKind.LIBCXXABI, make_artifact("libc++abi.a"))

        assert len(registry) == 2

    def test_take_hands_over_artifact(self):
        registry = ArtifactRegistry()
        artifact = make_artifact("libc++.a")
        registry.register(LibraryKind.LIBCXX, artifact)

        assert registry.take(LibraryKind.LIBCXX) is artifact
        assert registry.take(LibraryKind.LIBCXX) is None
        artifact.lock.release.assert_not_called()  # type: ignore[attr-defined]

    def test_release_all_releases_locks(self):
        registry = ArtifactRegistry()
        cxx = make_artifact("libc++.a")
        cxxabi = make_artifact("libc++abi.a")
        registry.register(LibraryKind.LIBCXX, cxx)
        registry.register(LibraryKind.LIBCXXABI, cxxabi)

        assert registry.release_all() == 2
        cxx.lock.release.assert_called_once()  # type: ignore[attr-defined]
        cxxabi.lock.release.assert_called_once()  # type: ignore[attr-defined]
        assert len(registry) == 0
        assert registry.release_all() == 0
