"""Catalog command: list the source catalogs of the runtime libraries."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cxxforge.cli.decorators import handle_errors
from cxxforge.cli.helpers import select_libraries
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.resolver import create_source_set_resolver


@handle_errors
def catalog_command(
    library: Annotated[
        str, typer.Option("--library", "-l", help="Library: c++, c++abi or all")
    ] = "all",
    target: Annotated[
        str | None,
        typer.Option("--target", "-t", help="Mark entries excluded for this target"),
    ] = None,
    single_threaded: Annotated[
        bool, typer.Option("--single-threaded", help="Target has no threads")
    ] = False,
) -> None:
    """List catalog entries, optionally marking those a target drops."""
    descriptor_target = (
        TargetDescriptor.parse(target, single_threaded=single_threaded)
        if target
        else None
    )
    resolver = create_source_set_resolver()
    console = Console()

    for descriptor in select_libraries(library):
        excluded: dict[str, str] = {}
        if descriptor_target is not None:
            excluded = resolver.resolve(descriptor, descriptor_target).excluded

        table = Table(
            title=f"lib{descriptor.root_name} ({len(descriptor.catalog)} files)",
            header_style="bold cyan",
        )
        table.add_column("Source", style="cyan", no_wrap=True)
        if descriptor_target is not None:
            table.add_column("Excluded by", style="red")

        for source in descriptor.catalog:
            if descriptor_target is None:
                table.add_row(source)
            else:
                table.add_row(source, excluded.get(source, ""))
        console.print(table)


def register_commands(app: typer.Typer) -> None:
    """Register catalog command with the main app."""
    app.command(name="catalog")(catalog_command)
