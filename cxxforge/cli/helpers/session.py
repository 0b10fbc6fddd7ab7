"""Build session helpers shared by CLI commands."""

from pathlib import Path

import typer

from cxxforge.config.user_config import UserConfig
from cxxforge.core.errors import ConfigError
from cxxforge.runtime.library import LIBCXX, LIBCXXABI, LibraryDescriptor, get_library
from cxxforge.runtime.models.abi import AbiVersion
from cxxforge.runtime.models.options import BuildOptions
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.session import BuildSession


def get_user_config(ctx: typer.Context) -> UserConfig:
    from cxxforge.cli.app import AppContext

    if isinstance(ctx.obj, AppContext):
        return ctx.obj.user_config

    from cxxforge.config.user_config import create_user_config

    return create_user_config()


def select_libraries(name: str) -> list[LibraryDescriptor]:
    """Libraries selected by a ``--library`` value; ``all`` builds libc++abi first."""
    if name.strip().lower() == "all":
        return [LIBCXXABI, LIBCXX]
    return [get_library(name)]


def resolve_lib_directory(user_config: UserConfig, lib_dir: Path | None) -> Path:
    """Installation root from the command line or the user configuration.

    Raises:
        ConfigError: If neither names one
    """
    lib_directory = lib_dir or user_config.get("lib_directory")
    if lib_directory is None:
        raise ConfigError(
            "No runtime library sources configured; pass --lib-dir or set "
            "CXXFORGE_LIB_DIRECTORY"
        )
    return Path(lib_directory).expanduser().resolve()


def create_session(
    user_config: UserConfig,
    target: str,
    lib_dir: Path | None,
    single_threaded: bool = False,
    abi_version: int | None = None,
    cache_dir: Path | None = None,
    options: BuildOptions | None = None,
    require_lib_dir: bool = True,
) -> BuildSession:
    """Create a build session from CLI arguments and user configuration.

    Raises:
        TargetError: If the target string is invalid
        ConfigError: If the installation root is required but not configured
    """
    descriptor = TargetDescriptor.parse(target, single_threaded=single_threaded)

    if require_lib_dir:
        lib_directory = resolve_lib_directory(user_config, lib_dir)
    else:
        lib_directory = lib_dir or user_config.get("lib_directory") or Path.cwd()

    requested = abi_version if abi_version is not None else user_config.get("abi_version")
    try:
        version = AbiVersion(requested)
    except ValueError:
        supported = ", ".join(str(int(v)) for v in AbiVersion)
        raise ConfigError(
            f"Unsupported ABI version: {requested}. Supported versions: {supported}"
        ) from None

    return BuildSession(
        target=descriptor,
        lib_directory=Path(lib_directory),
        global_cache_directory=Path(cache_dir or user_config.get("cache_path")),
        options=options or BuildOptions(verbose_cc=user_config.get("verbose_cc")),
        abi_version=version,
    )
