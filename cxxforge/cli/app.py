"""Main CLI application for cxxforge."""

import logging
import sys
from importlib.metadata import PackageNotFoundError, distribution
from typing import Annotated

import typer

from cxxforge.cli.decorators.error_handling import print_stack_trace_if_verbose
from cxxforge.config.user_config import UserConfig
from cxxforge.core.errors import ConfigError
from cxxforge.core.logging import setup_logging


__all__ = ["app", "main", "__version__", "AppContext"]

try:
    __version__ = distribution("cxxforge").version
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        verbose: int = 0,
        log_file: str | None = None,
        config_file: str | None = None,
    ):
        self.verbose = verbose
        self.log_file = log_file
        self.config_file = config_file

        from cxxforge.config.user_config import create_user_config

        self.user_config: UserConfig = create_user_config(cli_config_path=config_file)


app = typer.Typer(
    name="cxxforge",
    help=f"""cxxforge C++ runtime library builder v{__version__}

Builds libc++ and libc++abi as static libraries for a target:

Catalog → Source set → Compile flags → Sub-build → Artifact

Common workflows:
  • Inspect sources:  cxxforge resolve x86_64-linux-musl --library c++
  • Build libraries:  cxxforge build x86_64-linux-gnu --lib-dir /opt/llvm/lib
  • Check caching:    cxxforge verify-exempt x86_64-linux-gnu --alternate-root /tmp/lib""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to configuration file"),
    ] = None,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """cxxforge C++ runtime library builder."""
    if version:
        print(f"cxxforge v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    try:
        app_context = AppContext(
            verbose=verbose, log_file=log_file, config_file=config_file
        )
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from e
    ctx.obj = app_context

    # CLI flags win over the configured level
    if debug or verbose >= 2:
        log_level_name = "DEBUG"
    elif verbose == 1:
        log_level_name = "INFO"
    else:
        log_level_name = app_context.user_config.get("log_level")

    setup_logging(log_level_name=log_level_name, log_file=log_file)


def main() -> int:
    """Main CLI entry point."""
    exit_code = 0

    try:
        from cxxforge.cli.commands import register_all_commands

        register_all_commands(app)
        app()

    except SystemExit as e:
        exit_code = e.code if isinstance(e.code, int) else 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        print_stack_trace_if_verbose()
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
