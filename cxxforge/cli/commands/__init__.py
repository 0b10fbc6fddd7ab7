"""CLI command modules."""

import typer

from cxxforge.cli.commands.build import register_commands as register_build_commands
from cxxforge.cli.commands.catalog import (
    register_commands as register_catalog_commands,
)
from cxxforge.cli.commands.resolve import (
    register_commands as register_resolve_commands,
)
from cxxforge.cli.commands.verify_exempt import (
    register_commands as register_verify_exempt_commands,
)


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Args:
        app: The main Typer app
    """
    register_resolve_commands(app)
    register_build_commands(app)
    register_verify_exempt_commands(app)
    register_catalog_commands(app)
