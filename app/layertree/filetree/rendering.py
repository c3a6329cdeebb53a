"""ASCII rendering of file trees.

Each visible node becomes one row. Rows are numbered from 0 starting at
the first child of the root, in pre-order with children sorted by name,
so a UI can request any window of rows without rendering the rest.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from layertree.filetree.node import FileNode
    from layertree.filetree.tree import FileTree

NEW_LINE = "\n"
NO_BRANCH_SPACE = "    "
BRANCH_SPACE = "│   "
MIDDLE_ITEM = "├─"
LAST_ITEM = "└─"
UNCOLLAPSED_ITEM = "─ "
COLLAPSED_ITEM = "⊕ "


@dataclass(slots=True)
class RenderParams:
    """A node in the context of the rendered tree.

    Attributes:
        node: The node to render.
        spaces: Indentation flags inherited from the ancestors.
        child_spaces: Indentation flags handed down to this node's children.
        show_collapsed: Render with the collapsed glyph.
        is_last: Whether the node is the last visible sibling.
    """

    node: FileNode
    spaces: list[bool]
    child_spaces: list[bool]
    show_collapsed: bool = False
    is_last: bool = False


def _child_params(parent: RenderParams) -> list[RenderParams]:
    """Build render params for the visible children of a node."""
    node = parent.node
    if node.data.view_info.collapsed:
        return []

    visible = [
        node.children[name]
        for name in sorted(node.children)
        if not node.children[name].data.view_info.hidden
    ]

    result: list[RenderParams] = []
    for idx, child in enumerate(visible):
        is_last = idx == len(visible) - 1
        collapsed = child.data.view_info.collapsed
        has_children = not child.is_leaf

        child_spaces = list(parent.child_spaces)
        if has_children and not collapsed:
            child_spaces.append(is_last)

        result.append(
            RenderParams(
                node=child,
                spaces=parent.child_spaces,
                child_spaces=child_spaces,
                show_collapsed=collapsed and has_children,
                is_last=is_last,
            )
        )
    return result


def collect_rows(tree: FileTree, start_row: int, stop_row: int) -> list[RenderParams]:
    """Collect render params for the visible rows ``start_row..stop_row``.

    Rows before ``start_row`` are still walked so that indentation is
    correct; the walk stops as soon as ``stop_row`` is passed.
    """
    rows: list[RenderParams] = []
    to_visit: deque[RenderParams] = deque()
    to_visit.append(RenderParams(node=tree.root, spaces=[], child_spaces=[]))

    current_row = -1
    while to_visit:
        params = to_visit.popleft()

        # the root never takes a row
        if params.node is not tree.root:
            current_row += 1
            if current_row > stop_row:
                break
            if current_row >= start_row:
                rows.append(params)

        # children go to the front so the walk stays depth-first
        to_visit.extendleft(reversed(_child_params(params)))

    return rows


def render_between(
    tree: FileTree, start_row: int, stop_row: int, show_attributes: bool = False
) -> str:
    """Render the rows ``start_row..stop_row`` (inclusive) of a tree.

    Args:
        tree: Tree to render.
        start_row: First row to emit.
        stop_row: Last row to emit.
        show_attributes: Prefix every row with the node's metadata string.

    Returns:
        Newline-terminated rows concatenated into one string.
    """
    lines: list[str] = []
    for params in collect_rows(tree, start_row, stop_row):
        line = params.node.render_tree_line(params.spaces, params.is_last, params.show_collapsed)
        if show_attributes:
            line = params.node.metadata_string() + " " + line
        lines.append(line)
    return "".join(lines)
