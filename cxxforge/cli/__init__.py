"""Command-line interface for cxxforge."""

from cxxforge.cli.app import app, main


__all__ = ["app", "main"]
