"""Resolve command: show the compile units of a runtime library for a target."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from cxxforge.cli.decorators import handle_errors
from cxxforge.cli.helpers import create_session, get_user_config, select_libraries
from cxxforge.runtime.flags import create_flag_synthesizer
from cxxforge.runtime.resolver import create_source_set_resolver


logger = logging.getLogger(__name__)


def _collect_resolution(
    target: str,
    library: str,
    ctx: typer.Context,
    single_threaded: bool,
    abi_version: int | None,
    lib_dir: Path | None,
) -> list[dict[str, Any]]:
    user_config = get_user_config(ctx)
    session = create_session(
        user_config,
        target,
        lib_dir,
        single_threaded=single_threaded,
        abi_version=abi_version,
        require_lib_dir=False,
    )
    resolver = create_source_set_resolver()
    synthesizer = create_flag_synthesizer()

    results = []
    for descriptor in select_libraries(library):
        resolved = resolver.resolve(descriptor, session.target)
        units = synthesizer.synthesize(
            resolved, session.abi_version, session.lib_directory
        )
        results.append(
            {
                "library": descriptor.root_name,
                "target": session.target.triple,
                "single_threaded": session.target.single_threaded,
                "abi_version": int(session.abi_version),
                "units": [
                    {
                        "source": unit.source_id,
                        "path": str(unit.src_path),
                        "flags": list(unit.extra_flags),
                        "cache_exempt_flags": list(unit.cache_exempt_flags),
                    }
                    for unit in units
                ],
                "excluded": resolved.excluded,
            }
        )
    return results


def _print_resolution_table(results: list[dict[str, Any]]) -> None:
    console = Console()
    for result in results:
        table = Table(
            title=f"lib{result['library']} for {result['target']}"
            f"{' (single-threaded)' if result['single_threaded'] else ''}",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Source", style="cyan", no_wrap=True)
        table.add_column("Flags", style="dim")
        for unit in result["units"]:
            table.add_row(unit["source"], " ".join(unit["flags"]))
        console.print(table)

        if result["units"]:
            exempt = result["units"][0]["cache_exempt_flags"]
            console.print(f"[bold]Include flags:[/bold] {' '.join(exempt)}")
        if result["excluded"]:
            console.print(f"[bold]Excluded ({len(result['excluded'])}):[/bold]")
            for source, rule in result["excluded"].items():
                console.print(f"  {source} [dim]({rule})[/dim]")
        console.print()


@handle_errors
def resolve_command(
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
    output_format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text or json")
    ] = "text",
) -> None:
    """Show the source files and flags compiled for a target."""
    results = _collect_resolution(
        target, library, ctx, single_threaded, abi_version, lib_dir
    )

    if output_format.lower() == "json":
        typer.echo(json.dumps(results, indent=2))
    else:
        _print_resolution_table(results)


def register_commands(app: typer.Typer) -> None:
    """Register resolve command with the main app."""
    app.command(name="resolve")(resolve_command)
