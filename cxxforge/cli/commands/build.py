"""Build command: compile runtime libraries for a target."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from cxxforge.cli.decorators import handle_errors
from cxxforge.cli.helpers import create_session, get_user_config, select_libraries
from cxxforge.engine import create_compilation_engine
from cxxforge.runtime.builder import create_runtime_library_builder
from cxxforge.runtime.models.options import BuildOptions, OptimizeMode


logger = logging.getLogger(__name__)


@handle_errors
def build_command(
    ctx: typer.Context,
    target: Annotated[str, typer.Argument(help="Target in arch-os[-abi] form")],
    library: Annotated[
        str, typer.Option("--library", "-l", help="Library: c++, c++abi or all")
    ] = "all",
    single_threaded: Annotated[
        bool, typer.Option("--single-threaded", help="Target has no threads")
    ] = False,
    abi_version: Annotated[
        int | None, typer.Option("--abi-version", help="libc++ ABI version")
    ] = None,
    lib_dir: Annotated[
        Path | None,
        typer.Option("--lib-dir", help="Installation root of the runtime sources"),
    ] = None,
    cache_dir: Annotated[
        Path | None, typer.Option("--cache-dir", help="Global cache directory")
    ] = None,
    jobs: Annotated[
        int | None, typer.Option("--jobs", "-j", help="Parallel compile jobs")
    ] = None,
    optimize: Annotated[
        OptimizeMode, typer.Option("--optimize", "-O", help="Parent optimize mode")
    ] = OptimizeMode.DEBUG,
    debug_runtime_libs: Annotated[
        bool,
        typer.Option(
            "--debug-runtime-libs",
            help="Build runtime libraries with the parent's optimize mode",
        ),
    ] = False,
    no_cache: Annotated[
        bool, typer.Option("--no-cache", help="Always rebuild, bypassing the cache")
    ] = False,
    output_format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text or json")
    ] = "text",
) -> None:
    """Build libc++ and/or libc++abi as static libraries."""
    user_config = get_user_config(ctx)
    options = BuildOptions(
        optimize_mode=optimize,
        debug_runtime_libs=debug_runtime_libs,
        verbose_cc=user_config.get("verbose_cc"),
    )
    session = create_session(
        user_config,
        target,
        lib_dir,
        single_threaded=single_threaded,
        abi_version=abi_version,
        cache_dir=cache_dir,
        options=options,
    )
    engine = create_compilation_engine(user_config, use_cache=not no_cache, jobs=jobs)
    builder = create_runtime_library_builder(engine)

    built: dict[str, str] = {}
    try:
        with ThreadPoolExecutor(max_workers=engine.jobs) as pool:
            session.thread_pool = pool
            # One library at a time; each sub-build fans out over the pool
            for descriptor in select_libraries(library):
                registration = builder.build(session, descriptor)
                built[descriptor.root_name] = str(
                    registration.artifact.full_object_path
                )
    finally:
        session.thread_pool = None
        session.close()
        engine.close()

    if output_format.lower() == "json":
        payload = {"target": session.target.triple, "artifacts": built}
        typer.echo(json.dumps(payload, indent=2))
        return

    console = Console()
    for name, path in built.items():
        console.print(f"[green]✓[/green] lib{name}: {path}")


def register_commands(app: typer.Typer) -> None:
    """Register build command with the main app."""
    app.command(name="build")(build_command)
