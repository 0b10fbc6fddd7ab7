"""CLI helper functions."""

from cxxforge.cli.helpers.session import (
    create_session,
    get_user_config,
    resolve_lib_directory,
    select_libraries,
)


__all__ = [
    "create_session",
    "get_user_config",
    "resolve_lib_directory",
    "select_libraries",
]
