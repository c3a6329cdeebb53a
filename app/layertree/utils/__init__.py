"""Utility modules for layertree.

This module exports commonly used utility functions.
"""

from layertree.utils.formatting import (
    console,
    create_summary_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
    render_tree_text,
)

__all__ = [
    "console",
    "create_summary_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "render_tree_text",
]
