"""Tree command implementation.

Stacks image layers and prints the merged file tree.
"""

from typing import Annotated

import typer

from layertree.cli.types import (
    LayerOption,
    LayersArgument,
    load_layers,
    require_config,
    resolve_layer,
    set_view_flags,
)
from layertree.core.config import apply_view_config
from layertree.filetree import stack_range


def show_tree(
    layers: LayersArgument,
    layer: LayerOption = None,
    attributes: Annotated[
        bool | None,
        typer.Option(
            "--attributes/--no-attributes",
            "-a",
            help="Show permissions, owner and size (default from config).",
        ),
    ] = None,
    start: Annotated[
        int,
        typer.Option("--start", help="First row to show.", min=0),
    ] = 0,
    stop: Annotated[
        int | None,
        typer.Option("--stop", help="Last row to show (default: last row).", min=0),
    ] = None,
    collapse: Annotated[
        list[str] | None,
        typer.Option("--collapse", "-c", help="Collapse a directory (repeatable)."),
    ] = None,
    hide: Annotated[
        list[str] | None,
        typer.Option("--hide", help="Hide a path (repeatable)."),
    ] = None,
) -> None:
    """Show the merged file tree of image layers.

    Layers are stacked from the first directory up to --layer, applying
    whiteouts the way a union filesystem does.

    Examples:
        layertree tree base/ app/              # Merged view of both layers
        layertree tree base/ app/ --layer 0    # Base layer only
        layertree tree base/ app/ -a --stop 20 # First 21 rows with attributes
    """
    config = require_config()
    trees = load_layers(layers, config)
    top = resolve_layer(layer, len(trees))

    merged = stack_range(trees, 0, top)
    apply_view_config(merged, config)
    set_view_flags(merged, collapse, hide)

    show_attributes = config.show_attributes if attributes is None else attributes
    stop_row = merged.size if stop is None else stop
    typer.echo(merged.string_between(start, stop_row, show_attributes), nl=False)
