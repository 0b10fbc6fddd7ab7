"""Core test fixtures for the cxxforge project."""

from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

from cxxforge.runtime.catalog import LIBCXX_CATALOG, LIBCXXABI_CATALOG
from cxxforge.runtime.models.abi import AbiVersion
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.models.units import SubBuildOutput, SubBuildRequest
from cxxforge.runtime.protocols import ArtifactLockProtocol, CompilationEngineProtocol
from cxxforge.runtime.session import BuildSession


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove CXXFORGE_ variables and point XDG directories into tmp_path."""
    import os

    for key in list(os.environ):
        if key.startswith("CXXFORGE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    monkeypatch.chdir(tmp_path)


# ---- Runtime Library Fixtures ----


def populate_lib_directory(root: Path) -> Path:
    """Create an installation root with every catalog source and a header."""
    for catalog in (LIBCXX_CATALOG, LIBCXXABI_CATALOG):
        for source in catalog:
            path = root / catalog.subdir / source
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"// {source}\n")
    for include_dir in ("libcxx/include", "libcxxabi/include"):
        header_dir = root / include_dir
        header_dir.mkdir(parents=True, exist_ok=True)
        (header_dir / "__config").write_text("#pragma once\n")
    return root


@pytest.fixture
def lib_directory(tmp_path: Path) -> Path:
    """Installation root holding the runtime library sources."""
    return populate_lib_directory(tmp_path / "lib")


@pytest.fixture
def make_lib_directory(tmp_path: Path) -> Callable[[str], Path]:
    """Factory creating further installation roots below tmp_path."""

    def _make(name: str) -> Path:
        return populate_lib_directory(tmp_path / name)

    return _make


@pytest.fixture
def make_target() -> Callable[..., TargetDescriptor]:
    """Factory building target descriptors from triples."""

    def _make(triple: str, single_threaded: bool = False) -> TargetDescriptor:
        return TargetDescriptor.parse(triple, single_threaded=single_threaded)

    return _make


@pytest.fixture
def linux_target() -> TargetDescriptor:
    return TargetDescriptor.parse("x86_64-linux-gnu")


@pytest.fixture
def mock_lock() -> Mock:
    lock = Mock(spec=ArtifactLockProtocol)
    lock.held = True
    return lock


@pytest.fixture
def mock_engine(tmp_path: Path, mock_lock: Mock) -> Mock:
    """Compilation engine double that records requests and succeeds."""
    engine = Mock(spec=CompilationEngineProtocol)
    engine.has_llvm.return_value = True
    engine.check_available.return_value = True

    def _build(request: SubBuildRequest) -> SubBuildOutput:
        emit_path = tmp_path / "cache" / "o" / request.task / request.emit_basename
        return SubBuildOutput(emit_path=emit_path, lock=mock_lock)

    engine.build.side_effect = _build
    return engine


@pytest.fixture
def session(
    lib_directory: Path, linux_target: TargetDescriptor, tmp_path: Path
) -> Generator[BuildSession, None, None]:
    """Build session for x86_64-linux-gnu over the populated installation."""
    build_session = BuildSession(
        target=linux_target,
        lib_directory=lib_directory,
        global_cache_directory=tmp_path / "cache",
        abi_version=AbiVersion.V1,
    )
    yield build_session
    build_session.close()
