"""Verify that include-path flags do not change built artifacts."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cxxforge.cli.decorators import handle_errors
from cxxforge.cli.helpers import create_session, get_user_config
from cxxforge.engine import create_compilation_engine
from cxxforge.runtime.verification import verify_cache_exempt_flags


@handle_errors
def verify_exempt_command(
    ctx: typer.Context,
    target: Annotated[str, typer.Argument(help="Target in arch-os[-abi] form")],
    alternate_root: Annotated[
        Path,
        typer.Option(
            "--alternate-root",
            help="Second installation root holding identical sources",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ],
    library: Annotated[
        str, typer.Option("--library", "-l", help="Library: c++ or c++abi")
    ] = "c++abi",
    single_threaded: Annotated[
        bool, typer.Option("--single-threaded", help="Target has no threads")
    ] = False,
    lib_dir: Annotated[
        Path | None,
        typer.Option("--lib-dir", help="Installation root of the runtime sources"),
    ] = None,
    jobs: Annotated[
        int | None, typer.Option("--jobs", "-j", help="Parallel compile jobs")
    ] = None,
) -> None:
    """Build a library from two installation roots and compare the objects."""
    user_config = get_user_config(ctx)
    session = create_session(
        user_config, target, lib_dir, single_threaded=single_threaded
    )
    engine = create_compilation_engine(user_config, use_cache=False, jobs=jobs)
    try:
        report = verify_cache_exempt_flags(session, library, engine, alternate_root)
    finally:
        engine.close()

    console = Console()
    if report.matching:
        console.print(
            f"[green]✓[/green] lib{report.library} is identical from both roots"
        )
        return

    table = Table(title="Differing archive members", header_style="bold red")
    table.add_column("Member", style="cyan")
    for root in report.roots:
        table.add_column(str(root), style="dim")
    for member in report.differing_members:
        table.add_row(
            member,
            *(report.digests[str(root)].get(member, "-")[:12] for root in report.roots),
        )
    console.print(table)
    raise typer.Exit(1)


def register_commands(app: typer.Typer) -> None:
    """Register verify-exempt command with the main app."""
    app.command(name="verify-exempt")(verify_exempt_command)
