"""Layer file trees.

This module provides the path-indexed tree used to model image layers,
union-mount stacking of layer trees, diff annotation between stacked
states and ASCII rendering.
"""

from layertree.filetree.errors import (
    FileTreeError,
    NodeCreationError,
    PathNotFoundError,
    RootRemovalError,
    StackingError,
)
from layertree.filetree.models import DiffType, FileInfo, NodeData, ViewInfo
from layertree.filetree.node import (
    OPAQUE_WHITEOUT_PREFIX,
    WHITEOUT_PREFIX,
    FileNode,
    VisitEvaluator,
    Visitor,
)
from layertree.filetree.scanner import LayerScanner, scan_layers
from layertree.filetree.tree import FileTree, split_path, stack_range

__all__ = [
    "OPAQUE_WHITEOUT_PREFIX",
    "WHITEOUT_PREFIX",
    "DiffType",
    "FileInfo",
    "FileNode",
    "FileTree",
    "FileTreeError",
    "LayerScanner",
    "NodeCreationError",
    "NodeData",
    "PathNotFoundError",
    "RootRemovalError",
    "StackingError",
    "ViewInfo",
    "VisitEvaluator",
    "Visitor",
    "scan_layers",
    "split_path",
    "stack_range",
]
