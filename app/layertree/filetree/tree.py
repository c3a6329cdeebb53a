"""Path-indexed file trees and union-mount stacking.

A FileTree holds the entries of one image layer, or the merged view of
several layers. Trees are stacked in layer order to reproduce what a
running container sees, and compared to label every node with a
DiffType.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Iterator, Sequence

from layertree.filetree.errors import (
    FileTreeError,
    NodeCreationError,
    PathNotFoundError,
    StackingError,
)
from layertree.filetree.models import DiffType, FileInfo, NodeData
from layertree.filetree.node import FileNode, VisitEvaluator, Visitor
from layertree.filetree.rendering import render_between

logger = logging.getLogger(__name__)


def split_path(path: str) -> list[str]:
    """Split a slash-delimited path into its non-empty segments.

    Surrounding slashes are trimmed and empty segments skipped, so ``""``,
    ``"/"`` and whitespace-only strings all address the root. Whitespace
    inside a non-blank path is part of the names: ``" /a"`` has the
    segments ``" "`` and ``"a"``.
    """
    if not path.strip():
        return []
    return [name for name in path.strip("/").split("/") if name]


class FileTree:
    """A set of files and directories and their relations.

    Attributes:
        root: Node representing ``/``; never carries a payload.
        size: Number of nodes in the tree, excluding the root.
        file_size: Sum of the payload sizes of all nodes.
        name: Optional label, e.g. the layer the tree was built from.
        id: Unique identifier assigned at construction.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.id = uuid.uuid4()
        self.size = 0
        self.file_size = 0
        self.root = FileNode(tree=self, data=NodeData(file_info=FileInfo.placeholder()))

    def __repr__(self) -> str:
        return f"FileTree(name={self.name!r}, size={self.size}, id={self.id})"

    def __str__(self) -> str:
        return self.string()

    # ------------------------------------------------------------------
    # Path operations
    # ------------------------------------------------------------------

    def get_node(self, path: str) -> FileNode:
        """Fetch the node at a slash-delimited path (e.g. ``/a/node/path``).

        Raises:
            PathNotFoundError: If any segment of the path is missing.
        """
        node = self.root
        for name in split_path(path):
            child = node.children.get(name)
            if child is None:
                raise PathNotFoundError(path)
            node = child
        return node

    def has_path(self, path: str) -> bool:
        """Check if a path exists in the tree."""
        try:
            self.get_node(path)
        except PathNotFoundError:
            return False
        return True

    def add_path(self, path: str, info: FileInfo) -> FileNode:
        """Add a node at the given path, creating missing parents.

        Missing intermediate directories get a placeholder payload; only
        the last segment receives ``info``. Re-adding an existing path only
        replaces its payload.

        Args:
            path: Slash-delimited path of the node.
            info: Payload for the node.

        Returns:
            The node at ``path``.

        Raises:
            NodeCreationError: If a segment is not a valid node name.
        """
        names = split_path(path)
        node = self.root
        for idx, name in enumerate(names):
            is_last = idx == len(names) - 1
            child = node.children.get(name)
            if child is None:
                child = node.add_child(name, info if is_last else FileInfo.placeholder(name))
                if child is None:
                    raise NodeCreationError(path, name)
            elif is_last:
                child.set_file_info(info)
            node = child
        return node

    def remove_path(self, path: str) -> None:
        """Remove the node at the given path along with its subtree.

        Raises:
            PathNotFoundError: If the path does not exist.
            RootRemovalError: If the path addresses the root.
        """
        self.get_node(path).remove()

    def iter_nodes(self) -> Iterator[FileNode]:
        """Yield every node except the root, parents before children."""
        for node in self.root.iter_subtree():
            if node is not self.root:
                yield node

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def visit_depth_child_first(
        self, visitor: Visitor, evaluator: VisitEvaluator | None = None
    ) -> None:
        """Visit the tree depth-first, deepest nodes first (on bubble up)."""
        self.root.visit_depth_child_first(visitor, evaluator)

    def visit_depth_parent_first(
        self, visitor: Visitor, evaluator: VisitEvaluator | None = None
    ) -> None:
        """Visit the tree depth-first, shallowest nodes first (while sinking)."""
        self.root.visit_depth_parent_first(visitor, evaluator)

    def copy(self) -> FileTree:
        """Return a deep copy of this tree with a new id."""
        new_tree = FileTree(self.name)
        new_tree.size = self.size
        new_tree.file_size = self.file_size
        new_tree.root = self.root.copy()

        def rebind(node: FileNode) -> None:
            node.tree = new_tree

        new_tree.visit_depth_child_first(rebind)
        return new_tree

    # ------------------------------------------------------------------
    # Stacking
    # ------------------------------------------------------------------

    def stack(self, upper: FileTree) -> None:
        """Lay ``upper`` on top of this tree as a union filesystem would.

        Opaque directory markers first clear the matching directories of
        this tree. Then ``upper`` is walked children-first: whiteouts remove
        the path they shadow, every other node is added or overwrites the
        existing payload. A non-directory that replaces a directory drops
        the lower subtree.

        Raises:
            StackingError: On the first node that cannot be grafted.
        """
        opaque_dirs: set[str] = set()
        for marker in upper.iter_nodes():
            if marker.is_opaque_whiteout:
                self._clear_directory(marker.whiteout_target)
                opaque_dirs.add(marker.whiteout_target)

        def graft(node: FileNode) -> None:
            if node.is_root or node.is_opaque_whiteout:
                return
            if node.is_whiteout:
                # already cleared along with its opaque directory
                if node.parent is not None and node.parent.path in opaque_dirs:
                    return
                try:
                    self.remove_path(node.whiteout_target)
                except FileTreeError as e:
                    msg = f"Cannot remove node {node.whiteout_target}: {e}"
                    raise StackingError(msg, node.path) from e
                return

            info = node.data.file_info
            # implicit parents must not hide metadata from lower layers
            if not info.exists and self.has_path(node.path):
                return
            if not info.is_dir:
                self._clear_directory(node.path)
            try:
                self.add_path(node.path, info)
            except FileTreeError as e:
                msg = f"Cannot add node {node.path}: {e}"
                raise StackingError(msg, node.path) from e

        upper.visit_depth_child_first(graft)

    def drop_whiteouts(self) -> None:
        """Remove every whiteout marker node, opaque markers included."""
        markers = [node for node in self.iter_nodes() if node.is_whiteout]
        for marker in reversed(markers):
            marker.remove()

    def _clear_directory(self, path: str) -> None:
        """Remove every child of the directory at ``path`` if it exists."""
        try:
            directory = self.get_node(path)
        except PathNotFoundError:
            return
        for child in list(directory.children.values()):
            child.remove()

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(self, upper: FileTree) -> None:
        """Label this tree's nodes with how ``upper`` differs from it.

        This tree is the "before" state. Paths missing from ``upper`` are
        REMOVED, paths only in ``upper`` are created here and ADDED, and
        paths in both are compared by metadata. Directories become MODIFIED
        when anything beneath them changed.

        Raises:
            PathNotFoundError: If a whiteout in ``upper`` shadows a path
                this tree does not contain.
            NodeCreationError: If an added path cannot be created.
        """

        def mark_absent(node: FileNode) -> None:
            if not node.is_root and not upper.has_path(node.path):
                node.assign_diff_type(DiffType.REMOVED)

        self.visit_depth_parent_first(
            mark_absent, lambda node: node.data.diff_type != DiffType.REMOVED
        )

        added: set[FileNode] = set()

        def graft(upper_node: FileNode) -> None:
            if upper_node.is_root or upper_node.is_opaque_whiteout:
                return
            if upper_node.is_whiteout:
                self.get_node(upper_node.whiteout_target).assign_diff_type(DiffType.REMOVED)
                return

            info = upper_node.data.file_info
            try:
                lower_node = self.get_node(upper_node.path)
            except PathNotFoundError:
                self._add_compared(upper_node.path, info, added)
                return

            if lower_node in added:
                # parent created while adding a deeper path
                lower_node.set_file_info(info)
                return
            lower_node.derive_diff_type(lower_node.data.file_info.compare(info))

        upper.visit_depth_child_first(graft)

    def _add_compared(self, path: str, info: FileInfo, added: set[FileNode]) -> None:
        """Create ``path`` and label every node created on the way ADDED."""
        names = split_path(path)
        node = self.root
        for idx, name in enumerate(names):
            child = node.children.get(name)
            if child is None:
                payload = info if idx == len(names) - 1 else FileInfo.placeholder(name)
                child = node.add_child(name, payload)
                if child is None:
                    raise NodeCreationError(path, name)
                child.assign_diff_type(DiffType.ADDED)
                added.add(child)
            node = child

    def diff_summary(self) -> dict[DiffType, int]:
        """Count labelled nodes per diff type (unlabelled nodes are skipped)."""
        counts = Counter(
            node.data.diff_type for node in self.iter_nodes() if node.data.diff_type is not None
        )
        return {diff_type: counts.get(diff_type, 0) for diff_type in DiffType}

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def string(self, show_attributes: bool = False) -> str:
        """Render the entire tree as ASCII."""
        return render_between(self, 0, self.size, show_attributes)

    def string_between(self, start: int, stop: int, show_attributes: bool = False) -> str:
        """Render the rows ``start..stop`` (inclusive) of the tree as ASCII."""
        return render_between(self, start, stop, show_attributes)


def stack_range(trees: Sequence[FileTree], start: int, stop: int) -> FileTree:
    """Merge a range of layer trees into a single tree.

    The first tree is copied and the trees ``start..stop`` (inclusive) are
    stacked onto it in order. Whiteout markers are dropped from the copy, so
    none of them reaches the merged view. A layer that fails to stack is
    logged and skipped so that one malformed layer does not hide the rest of
    the image.

    Args:
        trees: One tree per layer, lowest layer first.
        start: Index of the first layer to stack.
        stop: Index of the last layer to stack.

    Returns:
        A new tree holding the merged view.

    Raises:
        ValueError: If ``trees`` is empty.
    """
    if not trees:
        msg = "Cannot stack an empty list of trees"
        raise ValueError(msg)

    tree = trees[0].copy()
    tree.drop_whiteouts()
    for idx in range(start, stop + 1):
        if idx == 0:
            # the copy already holds layer 0
            continue
        try:
            tree.stack(trees[idx])
        except StackingError as e:
            label = trees[idx].name or trees[idx].id
            logger.warning("Could not stack layer %d (%s): %s", idx, label, e)
    return tree
