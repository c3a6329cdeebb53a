"""CLI package for layertree.

This package contains the Typer application and all subcommands.
"""

from layertree.cli.main import app

__all__ = ["app"]
