"""File tree node.

A FileNode represents one path segment of a layer tree. It owns its
children; the parent and tree references are navigation links only,
used to rebuild paths and to keep the owning tree's counters current.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from layertree.filetree.errors import RootRemovalError
from layertree.filetree.models import DiffType, FileInfo, NodeData
from layertree.filetree.rendering import (
    BRANCH_SPACE,
    COLLAPSED_ITEM,
    LAST_ITEM,
    MIDDLE_ITEM,
    NEW_LINE,
    NO_BRANCH_SPACE,
    UNCOLLAPSED_ITEM,
)

if TYPE_CHECKING:
    from layertree.filetree.tree import FileTree

WHITEOUT_PREFIX = ".wh."
OPAQUE_WHITEOUT_PREFIX = ".wh..wh.."

# Processes, observes or transforms a node; raising aborts the traversal.
Visitor = Callable[["FileNode"], None]
# Returns False to skip a node together with its whole subtree.
VisitEvaluator = Callable[["FileNode"], bool]


def is_valid_name(name: str) -> bool:
    """Check whether a string can be used as a single path segment."""
    return bool(name) and name not in (".", "..") and "/" not in name and "\x00" not in name


class FileNode:
    """A single file or directory within a FileTree.

    Attributes:
        name: Path segment this node represents ("" for the root).
        parent: Enclosing node, None for the root.
        tree: Tree whose counters this node contributes to.
        children: Child nodes keyed by name.
        data: File metadata, diff classification and view state.
    """

    def __init__(
        self,
        name: str = "",
        *,
        parent: FileNode | None = None,
        tree: FileTree | None = None,
        data: NodeData | None = None,
    ) -> None:
        self.name = name
        self.parent = parent
        self.tree = tree
        self.children: dict[str, FileNode] = {}
        self.data = data if data is not None else NodeData()

    def __repr__(self) -> str:
        return f"FileNode({self.path!r}, children={len(self.children)})"

    def __str__(self) -> str:
        return self.name

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def is_root(self) -> bool:
        """True if the node has no parent."""
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        """True if the node has no children."""
        return not self.children

    @property
    def is_whiteout(self) -> bool:
        """True if the name carries the whiteout prefix."""
        return self.name.startswith(WHITEOUT_PREFIX)

    @property
    def is_opaque_whiteout(self) -> bool:
        """True if the node marks its parent directory as opaque."""
        return self.name.startswith(OPAQUE_WHITEOUT_PREFIX)

    @property
    def path(self) -> str:
        """Slash-joined names from the root to this node (``/`` for the root)."""
        names: list[str] = []
        node: FileNode | None = self
        while node is not None and node.parent is not None:
            names.append(node.name)
            node = node.parent
        return "/" + "/".join(reversed(names))

    @property
    def whiteout_target(self) -> str:
        """Path shadowed by this whiteout marker.

        A plain marker ``.wh.foo`` targets its sibling ``foo``; an opaque
        marker targets its parent directory.
        """
        parent_path = self.parent.path if self.parent is not None else "/"
        if self.is_opaque_whiteout:
            return parent_path
        target = self.name.removeprefix(WHITEOUT_PREFIX)
        return parent_path.rstrip("/") + "/" + target

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def add_child(self, name: str, info: FileInfo) -> FileNode | None:
        """Create a child node, or update the payload of an existing one.

        Args:
            name: Name of the child (a single path segment).
            info: Payload for the child.

        Returns:
            The new (or existing) child, or None if the name is invalid.
        """
        if not is_valid_name(name):
            return None

        existing = self.children.get(name)
        if existing is not None:
            # keep the children, replace the payload
            existing.set_file_info(info)
            return existing

        child = FileNode(name, parent=self, tree=self.tree, data=NodeData(file_info=info))
        self.children[name] = child
        if self.tree is not None:
            self.tree.size += 1
            self.tree.file_size += info.size
        return child

    def set_file_info(self, info: FileInfo) -> None:
        """Replace the payload, keeping the tree's byte total in sync."""
        if self.tree is not None:
            self.tree.file_size += info.size - self.data.file_info.size
        self.data.file_info = info

    def remove(self) -> None:
        """Detach this node and its subtree from the parent.

        Raises:
            RootRemovalError: If called on the root node.
        """
        if self.parent is None:
            raise RootRemovalError()

        count = 0
        total = 0
        for node in self.iter_subtree():
            count += 1
            total += node.data.file_info.size

        del self.parent.children[self.name]
        self.parent = None
        if self.tree is not None:
            self.tree.size -= count
            self.tree.file_size -= total

    def copy(self, parent: FileNode | None = None) -> FileNode:
        """Deep-copy the subtree rooted here under a new parent.

        Tree references are copied as-is; FileTree.copy rebinds them.
        """
        clone = FileNode(self.name, parent=parent, tree=self.tree, data=self.data.copy())
        for name, child in self.children.items():
            clone.children[name] = child.copy(clone)
        return clone

    def iter_subtree(self) -> Iterator[FileNode]:
        """Yield this node and all descendants, parents first."""
        pending = [self]
        while pending:
            node = pending.pop()
            yield node
            pending.extend(node.children[name] for name in sorted(node.children, reverse=True))

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def visit_depth_child_first(
        self, visitor: Visitor, evaluator: VisitEvaluator | None = None
    ) -> None:
        """Visit the subtree depth-first, descendants before their parent.

        Args:
            visitor: Called once per visited node; exceptions propagate
                and stop the traversal.
            evaluator: Optional predicate; a node for which it returns False
                is skipped along with its entire subtree.
        """
        pending: list[tuple[FileNode, bool]] = [(self, False)]
        while pending:
            node, expanded = pending.pop()
            if expanded:
                visitor(node)
                continue
            if evaluator is not None and not evaluator(node):
                continue
            pending.append((node, True))
            for name in sorted(node.children, reverse=True):
                pending.append((node.children[name], False))

    def visit_depth_parent_first(
        self, visitor: Visitor, evaluator: VisitEvaluator | None = None
    ) -> None:
        """Visit the subtree depth-first, each node before its descendants.

        Args:
            visitor: Called once per visited node; exceptions propagate
                and stop the traversal.
            evaluator: Optional predicate; a node for which it returns False
                is skipped along with its entire subtree.
        """
        pending = [self]
        while pending:
            node = pending.pop()
            if evaluator is not None and not evaluator(node):
                continue
            visitor(node)
            for name in sorted(node.children, reverse=True):
                pending.append(node.children[name])

    # ------------------------------------------------------------------
    # Diff classification
    # ------------------------------------------------------------------

    def assign_diff_type(self, diff_type: DiffType) -> None:
        """Label this node, never lowering an existing label.

        A REMOVED label is applied to every descendant as well.
        """
        if diff_type == DiffType.REMOVED:
            for node in self.iter_subtree():
                node.data.diff_type = DiffType.combine(node.data.diff_type, diff_type)
            return
        self.data.diff_type = DiffType.combine(self.data.diff_type, diff_type)

    def derive_diff_type(self, diff_type: DiffType) -> None:
        """Label this node from its own comparison and its children's labels.

        Leaves take ``diff_type`` directly. Directories fold in the label of
        every child, so any changed descendant marks them MODIFIED.
        """
        if self.is_leaf:
            self.assign_diff_type(diff_type)
            return

        derived = diff_type
        for child in self.children.values():
            derived = DiffType.merge(derived, child.data.diff_type)
        self.assign_diff_type(derived)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def metadata_string(self) -> str:
        """Render the attribute column: permissions, uid:gid and size."""
        info = self.data.file_info
        user_group = f"{info.uid:>5}:{info.gid:<5}"
        return f"{info.permissions} {user_group} {info.size_human:>9}"

    def render_tree_line(self, spaces: list[bool], last: bool, collapsed: bool) -> str:
        """Render this node as one line of an ASCII tree.

        Args:
            spaces: One flag per ancestor level; True if that ancestor was the
                last of its siblings (blank indent), False for a branch bar.
            last: Whether this node is the last of its siblings.
            collapsed: Whether to show the collapsed glyph.

        Returns:
            The rendered line, newline terminated.
        """
        other_branches = "".join(NO_BRANCH_SPACE if space else BRANCH_SPACE for space in spaces)
        this_branch = LAST_ITEM if last else MIDDLE_ITEM
        indicator = COLLAPSED_ITEM if collapsed else UNCOLLAPSED_ITEM
        return other_branches + this_branch + indicator + self.name + NEW_LINE
