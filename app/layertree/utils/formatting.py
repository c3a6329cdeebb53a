"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich, including
diff-colored tree rows.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from layertree.core.config import DiffColors
from layertree.filetree import DiffType
from layertree.filetree.rendering import collect_rows

if TYPE_CHECKING:
    from layertree.filetree import FileTree


def _detect_color_system() -> str | None:
    """Use truecolor on a TTY so hex diff colors render exactly, else let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


def get_rich_theme(colors: DiffColors | None = None) -> Theme:
    """Build the Rich theme for console output.

    Args:
        colors: Diff colors to use. If None, uses the defaults.

    Returns:
        Rich Theme with message styles and one style per diff type.
    """
    colors = colors or DiffColors()
    styles: dict[str, str] = {
        "info": "#0ec1c8",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "muted": "#b2bec3",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
    }
    for diff_type in DiffType:
        styles[diff_type.value] = colors.for_diff_type(diff_type)
    return Theme(styles)


# Shared console instances
console = Console(theme=get_rich_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_rich_theme(), stderr=True, color_system=_detect_color_system())


def diff_style(diff_type: DiffType | None) -> str:
    """Return the theme style name for a diff type."""
    if diff_type is None:
        return DiffType.UNMODIFIED.value
    return diff_type.value


def render_tree_text(
    tree: FileTree,
    start: int = 0,
    stop: int | None = None,
    *,
    show_attributes: bool = False,
    colors: DiffColors | None = None,
) -> Text:
    """Render a window of tree rows as Rich text colored by diff type.

    The row layout is identical to ``FileTree.string_between``; only the
    node name and attributes are styled.

    Args:
        tree: Tree to render.
        start: First row to render.
        stop: Last row to render. If None, renders to the end.
        show_attributes: Prefix rows with the attribute column.
        colors: Diff colors. If None, uses the defaults.

    Returns:
        Rich Text with one line per visible row.
    """
    colors = colors or DiffColors()
    last = tree.size if stop is None else stop

    text = Text()
    for params in collect_rows(tree, start, last):
        node = params.node
        style = colors.for_diff_type(node.data.diff_type)
        line = node.render_tree_line(params.spaces, params.is_last, params.show_collapsed)
        prefix, name = line[: -len(node.name) - 1], node.name
        if show_attributes:
            text.append(node.metadata_string() + " ", style=style)
        text.append(prefix)
        text.append(name, style=style)
        text.append("\n")
    return text


def create_summary_table(summary: dict[DiffType, int], title: str = "Layer Changes") -> Table:
    """Create a table with one row per diff type count.

    Args:
        summary: Count of nodes per diff type.
        title: Table title.

    Returns:
        Rich Table configured for summary display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Change", no_wrap=True)
    table.add_column("Entries", justify="right")
    for diff_type in (DiffType.ADDED, DiffType.MODIFIED, DiffType.REMOVED, DiffType.UNMODIFIED):
        style = diff_style(diff_type)
        table.add_row(f"[{style}]{diff_type.value}[/{style}]", str(summary.get(diff_type, 0)))
    return table


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
