"""Tests for the sub-build dispatcher."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import Mock

import pytest

from cxxforge.core.errors import SubBuildError
from cxxforge.runtime.builder import resolve_compile_units
from cxxforge.runtime.dispatcher import SubBuildDispatcher, static_lib_basename
from cxxforge.runtime.library import LIBCXX, LIBCXXABI
from cxxforge.runtime.models.options import BuildOptions, OptimizeMode
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.models.units import CacheMode, LinkMode, OutputMode
from cxxforge.runtime.session import BuildSession


class TestStaticLibBasename:
    @pytest.mark.parametrize(
        "triple,expected",
        [
            ("x86_64-linux-gnu", "libc++.a"),
            ("x86_64-windows-gnu", "libc++.a"),
            ("x86_64-windows-msvc", "c++.lib"),
            ("wasm32-wasi-musl", "libc++.a"),
        ],
    )
    def test_basename(
        self, make_target: Callable[..., TargetDescriptor], triple: str, expected: str
    ):
        assert static_lib_basename("c++", make_target(triple)) == expected


class TestCreateRequest:
    """Tests for request construction."""

    def test_request_is_static_library_without_hardening(
        self, mock_engine: Mock, session: BuildSession
    ):
        units = resolve_compile_units(session, LIBCXXABI)
        request = SubBuildDispatcher(mock_engine).create_request(
            LIBCXXABI, session, units
        )

        assert request.task == "libcxxabi"
        assert request.root_name == "c++abi"
        assert request.output_mode is OutputMode.LIB
        assert request.link_mode is LinkMode.STATIC
        assert request.cache_mode is CacheMode.WHOLE
        assert request.emit_basename == "libc++abi.a"
        assert request.compile_units == tuple(units)
        assert request.want_sanitize_c is False
        assert request.want_stack_check is False
        assert request.want_stack_protector == 0
        assert request.want_valgrind is False
        assert request.link_libc is True
        assert request.skip_linker_dependencies is True
        assert request.local_cache_directory == session.global_cache_directory

    def test_request_inherits_codegen_options(
        self, mock_engine: Mock, lib_directory: Path, tmp_path: Path
    ):
        options = BuildOptions(
            optimize_mode=OptimizeMode.RELEASE_SAFE,
            pie=True,
            lto=True,
            tsan=True,
            red_zone=False,
            omit_frame_pointer=True,
            function_sections=True,
        )
        session = BuildSession(
            target=TargetDescriptor.parse("x86_64-linux-gnu"),
            lib_directory=lib_directory,
            global_cache_directory=tmp_path / "cache",
            options=options,
        )
        request = SubBuildDispatcher(mock_engine).create_request(LIBCXX, session, [])

        assert request.optimize_mode is OptimizeMode.RELEASE_FAST
        assert request.strip is True
        assert request.want_pie and request.want_lto and request.want_tsan
        assert request.want_red_zone is False
        assert request.omit_frame_pointer is True
        assert request.function_sections is True

    def test_cache_inputs_exclude_installation_paths(
        self, mock_engine: Mock, session: BuildSession
    ):
        units = resolve_compile_units(session, LIBCXX)
        request = SubBuildDispatcher(mock_engine).create_request(LIBCXX, session, units)
        inputs = request.cache_inputs()

        assert str(session.lib_directory) not in repr(inputs)
        assert str(session.global_cache_directory) not in repr(inputs)
        assert inputs["units"][0] == {
            "source": units[0].source_id,
            "flags": list(units[0].extra_flags),
        }


class TestDispatch:
    """Tests for blocking dispatch to the engine."""

    def test_dispatch_returns_artifact_with_lock(
        self, mock_engine: Mock, mock_lock: Mock, session: BuildSession
    ):
        dispatcher = SubBuildDispatcher(mock_engine)
        request = dispatcher.create_request(LIBCXX, session, [])

        artifact = dispatcher.dispatch(request)

        mock_engine.build.assert_called_once_with(request)
        assert artifact.full_object_path.name == "libc++.a"
        assert artifact.lock is mock_lock

    def test_sub_build_error_propagates_unchanged(
        self, mock_engine: Mock, session: BuildSession
    ):
        error = SubBuildError("compile failed", task="libcxx", errors=["src/any.cpp: boom"])
        mock_engine.build.side_effect = error
        dispatcher = SubBuildDispatcher(mock_engine)

        with pytest.raises(SubBuildError) as exc_info:
            dispatcher.dispatch(dispatcher.create_request(LIBCXX, session, []))

        assert exc_info.value is error
        assert mock_engine.build.call_count == 1

    def test_os_error_becomes_sub_build_error(
        self, mock_engine: Mock, session: BuildSession
    ):
        mock_engine.build.side_effect = FileNotFoundError("src/any.cpp")
        dispatcher = SubBuildDispatcher(mock_engine)

        with pytest.raises(SubBuildError) as exc_info:
            dispatcher.dispatch(dispatcher.create_request(LIBCXX, session, []))

        assert exc_info.value.task == "libcxx"
        assert exc_info.value.errors == ["src/any.cpp"]
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
