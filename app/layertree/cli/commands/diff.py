"""Diff command implementation.

Compares the merged view below a layer with the merged view including
it, showing what the layer added, modified and removed.
"""

import json
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
from layertree.filetree import DiffType, FileTree, FileTreeError, stack_range
from layertree.utils.formatting import (
    console,
    create_summary_table,
    diff_style,
    print_error,
    print_success,
    render_tree_text,
)


def _changes_to_dict(tree: FileTree, top: int) -> dict[str, object]:
    """Convert a compared tree to a dictionary for JSON output.

    Args:
        tree: Tree labelled by FileTree.compare.
        top: Index of the compared layer.

    Returns:
        Dictionary with the summary counts and every changed path.
    """
    summary = tree.diff_summary()
    changes = [
        {"path": node.path, "diff_type": node.data.diff_type.value}
        for node in tree.iter_nodes()
        if node.data.diff_type is not None and node.data.diff_type != DiffType.UNMODIFIED
    ]
    return {
        "layer": top,
        "summary": {diff_type.value: count for diff_type, count in summary.items()},
        "changes": changes,
    }


def diff_layers(
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
    collapse: Annotated[
        list[str] | None,
        typer.Option("--collapse", "-c", help="Collapse a directory (repeatable)."),
    ] = None,
    brief: Annotated[
        bool,
        typer.Option(
            "--brief",
            "-b",
            help="Show summary counts only.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Show what a layer changes in the merged file tree.

    The merged view of layers 0..N-1 is compared with the merged view of
    layers 0..N. Layer 0 is compared against an empty tree.

    Difference types:
      added: Path introduced by the layer
      modified: Metadata changed (or, for directories, something below it)
      removed: Path deleted by a whiteout in the layer

    Examples:
        layertree diff base/ app/              # Changes made by app/
        layertree diff base/ app/ --brief      # Summary counts only
        layertree diff base/ app/ --json       # JSON output for scripting
    """
    config = require_config()
    trees = load_layers(layers, config)
    top = resolve_layer(layer, len(trees))

    before = stack_range(trees, 0, top - 1) if top > 0 else FileTree()
    after = stack_range(trees, 0, top)

    try:
        before.compare(after)
    except FileTreeError as e:
        print_error(f"Cannot compare layers: {e}")
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(_changes_to_dict(before, top)))
        return

    summary = before.diff_summary()
    changed = sum(count for diff_type, count in summary.items() if diff_type != DiffType.UNMODIFIED)

    if brief:
        for diff_type in (DiffType.ADDED, DiffType.MODIFIED, DiffType.REMOVED):
            style = diff_style(diff_type)
            label = diff_type.value.capitalize()
            console.print(f"[{style}]{label}:[/{style}] {summary[diff_type]}")
        console.print(f"[muted]Total changes: {changed}[/muted]")
        return

    if not changed:
        print_success(f"Layer {top} changes nothing.")
        return

    apply_view_config(before, config)
    set_view_flags(before, collapse, None)
    show_attributes = config.show_attributes if attributes is None else attributes
    console.print(render_tree_text(before, show_attributes=show_attributes, colors=config.colors))
    console.print(create_summary_table(summary, title=f"Layer {top} Changes"))
