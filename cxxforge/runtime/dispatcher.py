"""Sub-build dispatcher for runtime library builds."""

import logging
import time

from cxxforge.core.errors import SubBuildError
from cxxforge.core.structlog_logger import get_struct_logger
from cxxforge.runtime.library import LibraryDescriptor
from cxxforge.runtime.models.options import runtime_optimize_mode, runtime_strip
from cxxforge.runtime.models.target import Abi, Os, TargetDescriptor
from cxxforge.runtime.models.units import (
    BuiltArtifact,
    CacheMode,
    CompileUnit,
    LinkMode,
    OutputMode,
    SubBuildRequest,
)
from cxxforge.runtime.protocols import CompilationEngineProtocol
from cxxforge.runtime.session import BuildSession


logger = get_struct_logger(__name__)


def static_lib_basename(root_name: str, target: TargetDescriptor) -> str:
    """File name of a static library for target, e.g. ``libc++.a``."""
    if target.os is Os.WINDOWS and target.abi is Abi.MSVC:
        return f"{root_name}.lib"
    return f"lib{root_name}.a"


class SubBuildDispatcher:
    """Package resolved compile units into a request and run it synchronously."""

    def __init__(self, engine: CompilationEngineProtocol) -> None:
        self.engine = engine

    def create_request(
        self,
        library: LibraryDescriptor,
        session: BuildSession,
        units: list[CompileUnit],
    ) -> SubBuildRequest:
        """Build a self-contained static-library request for one library.

        Args:
            library: Library being built
            session: Parent build session providing target and options
            units: Resolved compile units, in catalog order

        Returns:
            SubBuildRequest: Request consumed by exactly one dispatch
        """
        target = session.target
        options = session.options
        return SubBuildRequest(
            task=library.task,
            root_name=library.root_name,
            target=target,
            output_mode=OutputMode.LIB,
            link_mode=LinkMode.STATIC,
            emit_basename=static_lib_basename(library.root_name, target),
            compile_units=tuple(units),
            lib_directory=session.lib_directory,
            # Sub-builds always go to the global cache
            global_cache_directory=session.global_cache_directory,
            local_cache_directory=session.global_cache_directory,
            cache_mode=CacheMode.WHOLE,
            optimize_mode=runtime_optimize_mode(options, target),
            strip=runtime_strip(options),
            want_red_zone=options.red_zone,
            omit_frame_pointer=options.omit_frame_pointer,
            want_tsan=options.tsan,
            want_pic=options.pic,
            want_pie=options.pie,
            want_lto=options.lto,
            function_sections=options.function_sections,
            is_native_os=options.is_native_os,
            is_native_abi=options.is_native_abi,
            libc_installation=options.libc_installation,
            verbose_cc=options.verbose_cc,
            verbose_link=options.verbose_link,
            thread_pool=session.thread_pool,
        )

    def dispatch(self, request: SubBuildRequest) -> BuiltArtifact:
        """Run the sub-build and block until the engine reports back.

        Failures are never retried: a runtime library with missing
        translation units cannot be linked against.

        Raises:
            SubBuildError: If the engine fails, or cannot read/write its files
        """
        start_time = time.time()
        logger.info(
            "sub_build_started",
            task=request.task,
            target=request.target.triple,
            units=len(request.compile_units),
        )

        try:
            output = self.engine.build(request)
        except SubBuildError as e:
            logger.error("sub_build_failed", task=request.task, error=str(e))
            raise
        except OSError as e:
            exc_info = logging.getLogger(__name__).isEnabledFor(logging.DEBUG)
            logger.error(
                "sub_build_failed", task=request.task, error=str(e), exc_info=exc_info
            )
            raise SubBuildError(
                f"sub-compilation of {request.task} failed",
                task=request.task,
                errors=[str(e)],
            ) from e

        logger.info(
            "sub_build_finished",
            task=request.task,
            artifact=str(output.emit_path),
            cache_hit=output.cache_hit,
            seconds=round(time.time() - start_time, 3),
        )
        return BuiltArtifact(full_object_path=output.emit_path, lock=output.lock)
