"""Clang based compilation engine for runtime library sub-builds."""

import logging
import os
import shlex
import shutil
import subprocess
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path

from cxxforge.core.errors import SubBuildError
from cxxforge.engine.cache import ArtifactIndex
from cxxforge.engine.cache_key import compute_cache_key
from cxxforge.engine.lock import ArtifactLock
from cxxforge.runtime.models.options import OptimizeMode
from cxxforge.runtime.models.target import Abi, Os, TargetDescriptor
from cxxforge.runtime.models.units import CompileUnit, SubBuildOutput, SubBuildRequest


OPTIMIZE_FLAGS: dict[OptimizeMode, tuple[str, ...]] = {
    OptimizeMode.DEBUG: ("-O0",),
    OptimizeMode.RELEASE_SAFE: ("-O2",),
    OptimizeMode.RELEASE_FAST: ("-O2",),
    OptimizeMode.RELEASE_SMALL: ("-Os",),
}


def clang_triple(target: TargetDescriptor) -> str:
    """Target triple in the form clang expects."""
    if target.os in (Os.MACOS, Os.IOS):
        return f"{target.arch}-apple-{target.os.value}"
    if target.os is Os.WINDOWS:
        return f"{target.arch}-pc-windows-{target.abi.value}"
    if target.os is Os.WASI or target.abi is Abi.NONE:
        return f"{target.arch}-unknown-{target.os.value}"
    return f"{target.arch}-unknown-{target.os.value}-{target.abi.value}"


def codegen_flags(request: SubBuildRequest) -> list[str]:
    """Flags derived from the request's inherited build options."""
    flags = list(OPTIMIZE_FLAGS[request.optimize_mode])
    if not request.strip:
        flags.append("-g")
    if request.want_stack_protector == 0:
        flags.append("-fno-stack-protector")
    if not request.want_red_zone:
        flags.append("-mno-red-zone")
    flags.append(
        "-fomit-frame-pointer" if request.omit_frame_pointer else "-fno-omit-frame-pointer"
    )
    if request.want_pie:
        flags.append("-fPIE")
    if request.want_lto:
        flags.append("-flto=thin")
    if request.function_sections:
        flags.extend(["-ffunction-sections", "-fdata-sections"])
    if request.want_tsan:
        flags.append("-fsanitize=thread")
    if request.libc_installation is not None:
        flags.append(f"--sysroot={request.libc_installation}")
    return flags


class ClangCompilationEngine:
    """Compile runtime libraries with clang++ and archive them with llvm-ar.

    Outputs are cached as a whole: a request whose cache key already has an
    indexed artifact is served without compiling anything.
    """

    def __init__(
        self,
        compiler: str = "clang++",
        archiver: str = "llvm-ar",
        use_cache: bool = True,
        jobs: int | None = None,
    ) -> None:
        self.compiler = compiler
        self.archiver = archiver
        self.use_cache = use_cache
        self.jobs = jobs or os.cpu_count() or 1
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._indexes: dict[Path, ArtifactIndex] = {}
        self._indexes_lock = threading.Lock()
        self._engine_id: str | None = None

    def has_llvm(self) -> bool:
        return shutil.which(self.compiler) is not None

    def check_available(self) -> bool:
        return self.has_llvm() and shutil.which(self.archiver) is not None

    def engine_id(self) -> str:
        """Compiler identity that takes part in every cache key."""
        if self._engine_id is None:
            try:
                result = subprocess.run(
                    [self.compiler, "--version"],
                    capture_output=True,
                    text=True,
                    check=False,
                )
                version = result.stdout.splitlines()[0] if result.stdout else ""
            except OSError:
                version = ""
            self._engine_id = f"{self.compiler}:{version}"
        return self._engine_id

    def build(self, request: SubBuildRequest) -> SubBuildOutput:
        """Run a sub-build, or serve it from the cache.

        A cache hit only needs a shared lock, so it succeeds while other
        callers hold the same artifact. A miss takes the exclusive lock, checks
        the index again and downgrades to shared once the archive is in place.

        Raises:
            SubBuildError: If a translation unit or the archive step fails
        """
        key = compute_cache_key(request, self.engine_id())
        out_dir = request.global_cache_directory / "o" / key
        lock_path = out_dir / "artifact.lock"
        index = self._index(request.global_cache_directory) if self.use_cache else None

        if index is not None:
            lock = ArtifactLock.acquire(lock_path, exclusive=False)
            try:
                cached = index.lookup(key)
            except Exception:
                lock.release()
                raise
            if cached is not None:
                self.logger.info("Using cached %s from %s", request.task, cached)
                return SubBuildOutput(emit_path=cached, lock=lock, cache_hit=True)
            lock.release()

        lock = ArtifactLock.acquire(lock_path, exclusive=True)
        try:
            # Another builder may have finished while we waited
            cached = index.lookup(key) if index is not None else None
            if cached is not None:
                self.logger.info("Using cached %s from %s", request.task, cached)
                emit_path, cache_hit = cached, True
            else:
                emit_path, cache_hit = out_dir / request.emit_basename, False
                self._compile_and_archive(request, out_dir, emit_path)
                if index is not None:
                    index.store(key, emit_path, request.task, len(request.compile_units))
        except Exception:
            lock.release()
            raise

        lock.downgrade()
        return SubBuildOutput(emit_path=emit_path, lock=lock, cache_hit=cache_hit)

    def _index(self, cache_directory: Path) -> ArtifactIndex:
        with self._indexes_lock:
            index = self._indexes.get(cache_directory)
            if index is None:
                index = ArtifactIndex(cache_directory / "index")
                self._indexes[cache_directory] = index
            return index

    def compile_command(
        self, request: SubBuildRequest, unit: CompileUnit, obj_path: Path
    ) -> list[str]:
        return [
            self.compiler,
            f"--target={clang_triple(request.target)}",
            *codegen_flags(request),
            *unit.extra_flags,
            *unit.cache_exempt_flags,
            "-c",
            str(unit.src_path),
            "-o",
            str(obj_path),
        ]

    def _compile_unit(
        self, request: SubBuildRequest, unit: CompileUnit, obj_path: Path
    ) -> str | None:
        """Compile one unit, returning an error message on failure."""
        obj_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.compile_command(request, unit, obj_path)
        if request.verbose_cc:
            self.logger.info("%s", shlex.join(cmd))

        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        if result.returncode != 0:
            stderr = result.stderr.strip()
            return f"{unit.source_id}: {stderr or f'exit code {result.returncode}'}"
        return None

    def _compile_and_archive(
        self, request: SubBuildRequest, out_dir: Path, emit_path: Path
    ) -> None:
        obj_dir = out_dir / "obj"
        objects = [
            obj_dir / Path(unit.source_id or unit.src_path.name).with_suffix(".o")
            for unit in request.compile_units
        ]

        own_pool: ThreadPoolExecutor | None = None
        pool: Executor
        if request.thread_pool is not None:
            pool = request.thread_pool
        else:
            own_pool = ThreadPoolExecutor(max_workers=self.jobs)
            pool = own_pool

        try:
            futures: list[Future[str | None]] = [
                pool.submit(self._compile_unit, request, unit, obj_path)
                for unit, obj_path in zip(request.compile_units, objects, strict=True)
            ]
            errors = [error for future in futures if (error := future.result())]
        finally:
            if own_pool is not None:
                own_pool.shutdown(wait=True)

        if errors:
            shutil.rmtree(obj_dir, ignore_errors=True)
            raise SubBuildError(
                f"sub-compilation of {request.task} failed",
                task=request.task,
                errors=errors,
            )

        self._archive(request, objects, emit_path)
        shutil.rmtree(obj_dir, ignore_errors=True)

    def _archive(
        self, request: SubBuildRequest, objects: list[Path], emit_path: Path
    ) -> None:
        tmp_path = emit_path.with_name(emit_path.name + ".tmp")
        tmp_path.unlink(missing_ok=True)
        cmd = [self.archiver, "rcs", str(tmp_path), *(str(obj) for obj in objects)]
        if request.verbose_link:
            self.logger.info("%s", shlex.join(cmd))

        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        if result.returncode != 0:
            tmp_path.unlink(missing_ok=True)
            raise SubBuildError(
                f"archiving {request.emit_basename} failed",
                task=request.task,
                errors=[result.stderr.strip()],
            )
        os.replace(tmp_path, emit_path)

    def close(self) -> None:
        with self._indexes_lock:
            for index in self._indexes.values():
                index.close()
            self._indexes.clear()


def create_clang_engine(
    compiler: str = "clang++",
    archiver: str = "llvm-ar",
    use_cache: bool = True,
    jobs: int | None = None,
) -> ClangCompilationEngine:
    return ClangCompilationEngine(
        compiler=compiler, archiver=archiver, use_cache=use_cache, jobs=jobs
    )
