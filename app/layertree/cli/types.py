"""Shared types and utilities for CLI commands.

This module provides the layer argument type and helpers used by the
tree and diff commands.
"""

from pathlib import Path
from typing import Annotated

import typer

from layertree.core.config import ConfigError, ViewConfig, load_config_or_default
from layertree.filetree import FileTree, PathNotFoundError, scan_layers
from layertree.utils.formatting import print_error, print_warning

LayersArgument = Annotated[
    list[Path],
    typer.Argument(
        help="Unpacked layer directories, lowest layer first.",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
]

LayerOption = Annotated[
    int | None,
    typer.Option(
        "--layer",
        "-l",
        help="Index of the top layer to show (default: last layer).",
    ),
]


def require_config() -> ViewConfig:
    """Load the view config or exit with an error message.

    Raises:
        typer.Exit: If the config file exists but is invalid.
    """
    try:
        return load_config_or_default()
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e


def resolve_layer(layer: int | None, count: int) -> int:
    """Return the top layer index, defaulting to the last layer.

    Raises:
        typer.Exit: If the index is out of range.
    """
    if layer is None:
        return count - 1
    if not 0 <= layer < count:
        print_error(f"Layer index {layer} out of range (0-{count - 1}).")
        raise typer.Exit(code=1)
    return layer


def load_layers(paths: list[Path], config: ViewConfig) -> list[FileTree]:
    """Scan layer directories or exit with an error message.

    Raises:
        typer.Exit: If a layer cannot be scanned.
    """
    try:
        return scan_layers(paths, with_digest=config.with_digest)
    except OSError as e:
        print_error(f"Cannot scan layer: {e}")
        raise typer.Exit(code=1) from e


def set_view_flags(tree: FileTree, collapse: list[str] | None, hide: list[str] | None) -> None:
    """Collapse and hide the given paths, warning about missing ones."""
    for path in collapse or []:
        try:
            tree.get_node(path).data.view_info.collapsed = True
        except PathNotFoundError:
            print_warning(f"Cannot collapse {path}: path not found")
    for path in hide or []:
        try:
            tree.get_node(path).data.view_info.hidden = True
        except PathNotFoundError:
            print_warning(f"Cannot hide {path}: path not found")
