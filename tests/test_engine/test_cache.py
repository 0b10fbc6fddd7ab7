"""Tests for the diskcache-backed artifact index."""

from pathlib import Path

from cxxforge.engine.cache import ArtifactIndex


class TestArtifactIndex:
    def test_miss_then_hit(self, tmp_path: Path):
        artifact = tmp_path / "o" / "key" / "libc++.a"
        artifact.parent.mkdir(parents=True)
        artifact.write_bytes(b"!<arch>\n")

        with ArtifactIndex(tmp_path / "index") as index:
            assert index.lookup("key") is None
            index.store("key", artifact, "libcxx", 52)

            assert index.lookup("key") == artifact
            assert index.hit_count == 1
            assert index.miss_count == 1
            assert index.manifest("key")["unit_count"] == 52  # type: ignore[index]
            assert index.keys() == ["key"]

    def test_stale_entry_is_dropped(self, tmp_path: Path):
        with ArtifactIndex(tmp_path / "index") as index:
            index.store("key", tmp_path / "missing.a", "libcxxabi", 19)

            assert index.lookup("key") is None
            assert index.manifest("key") is None

    def test_index_persists_across_instances(self, tmp_path: Path):
        artifact = tmp_path / "libc++abi.a"
        artifact.write_bytes(b"!<arch>\n")

        with ArtifactIndex(tmp_path / "index") as index:
            index.store("key", artifact, "libcxxabi", 19)

        with ArtifactIndex(tmp_path / "index") as index:
            assert index.lookup("key") == artifact
            assert index.forget("key") is True
            assert index.lookup("key") is None
