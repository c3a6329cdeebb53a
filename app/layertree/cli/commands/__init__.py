"""CLI commands for layertree.

This package contains all subcommand implementations.
"""

from layertree.cli.commands import config, diff, tree

__all__ = ["config", "diff", "tree"]
