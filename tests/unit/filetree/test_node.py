"""Unit tests for FileNode.

Tests for child management, whiteout detection, paths, traversal and
diff labelling of individual nodes.
"""

from collections.abc import Callable

import pytest
from layertree.filetree import DiffType, FileInfo, FileNode, FileTree, RootRemovalError


class TestAddChild:
    """Tests for FileNode.add_child."""

    def test_adds_child_and_updates_counters(self, make_info: Callable[..., FileInfo]) -> None:
        """add_child links the child and updates tree counters."""
        tree = FileTree()
        child = tree.root.add_child("etc", make_info("etc", 7))

        assert child is not None
        assert child.parent is tree.root
        assert child.tree is tree
        assert tree.root.children["etc"] is child
        assert tree.size == 1
        assert tree.file_size == 7

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "nul\x00"])
    def test_invalid_name_returns_none(self, make_info: Callable[..., FileInfo], name: str) -> None:
        """add_child refuses names that are not a single path segment."""
        tree = FileTree()

        assert tree.root.add_child(name, make_info(name)) is None
        assert tree.size == 0

    def test_existing_child_keeps_children(self, make_info: Callable[..., FileInfo]) -> None:
        """add_child on an existing name replaces only the payload."""
        tree = FileTree()
        tree.add_path("/a/b", make_info("b", 1))

        node = tree.root.add_child("a", make_info("a", 4, is_dir=True))

        assert node is tree.get_node("/a")
        assert "b" in node.children
        assert node.data.file_info.size == 4
        assert tree.size == 2
        assert tree.file_size == 5


class TestWhiteouts:
    """Tests for whiteout name detection and targets."""

    def test_plain_whiteout(self, make_info: Callable[..., FileInfo]) -> None:
        """A .wh. entry targets its sibling."""
        tree = FileTree()
        node = tree.add_path("/etc/.wh.passwd", make_info(".wh.passwd"))

        assert node.is_whiteout
        assert not node.is_opaque_whiteout
        assert node.whiteout_target == "/etc/passwd"

    def test_opaque_whiteout(self, make_info: Callable[..., FileInfo]) -> None:
        """An opaque marker is also a whiteout and targets its directory."""
        tree = FileTree()
        node = tree.add_path("/var/cache/.wh..wh..opq", make_info(".wh..wh..opq"))

        assert node.is_whiteout
        assert node.is_opaque_whiteout
        assert node.whiteout_target == "/var/cache"

    def test_whiteout_at_top_level(self, make_info: Callable[..., FileInfo]) -> None:
        """A whiteout directly below the root targets a top-level path."""
        tree = FileTree()
        node = tree.add_path("/.wh.tmp", make_info(".wh.tmp"))

        assert node.whiteout_target == "/tmp"

    def test_regular_name(self, make_info: Callable[..., FileInfo]) -> None:
        """An ordinary name is not a whiteout."""
        tree = FileTree()
        node = tree.add_path("/what.wh.ever", make_info("what.wh.ever"))

        assert not node.is_whiteout
        assert not node.is_opaque_whiteout


class TestPath:
    """Tests for FileNode.path."""

    def test_root_path(self) -> None:
        """The root's path is /."""
        assert FileTree().root.path == "/"

    def test_nested_path(self, sample_tree: FileTree) -> None:
        """path joins every name from the root."""
        assert sample_tree.get_node("/a/b").path == "/a/b"

    def test_is_leaf_and_is_root(self, sample_tree: FileTree) -> None:
        """is_leaf and is_root reflect the node position."""
        assert sample_tree.root.is_root
        assert not sample_tree.get_node("/a").is_leaf
        assert sample_tree.get_node("/a/b").is_leaf


class TestRemove:
    """Tests for FileNode.remove."""

    def test_remove_subtree_updates_counters(self, sample_tree: FileTree) -> None:
        """remove detaches the subtree and subtracts its size."""
        sample_tree.get_node("/a").remove()

        assert not sample_tree.has_path("/a")
        assert not sample_tree.has_path("/a/b")
        assert sample_tree.size == 1
        assert sample_tree.file_size == 1

    def test_remove_root_raises(self, sample_tree: FileTree) -> None:
        """Removing the root is refused."""
        with pytest.raises(RootRemovalError):
            sample_tree.root.remove()


class TestCopy:
    """Tests for FileNode.copy."""

    def test_copy_is_deep(self, sample_tree: FileTree) -> None:
        """copy duplicates the subtree with new parent links."""
        original = sample_tree.get_node("/a")
        clone = original.copy()

        assert clone is not original
        assert clone.parent is None
        assert clone.children["b"] is not original.children["b"]
        assert clone.children["b"].parent is clone

        clone.children["b"].data.view_info.hidden = True
        assert original.children["b"].data.view_info.hidden is False


class TestTraversal:
    """Tests for depth-first node visits."""

    def test_child_first_order(self, sample_tree: FileTree) -> None:
        """Descendants are visited before their parent, siblings sorted."""
        seen: list[str] = []
        sample_tree.root.visit_depth_child_first(lambda node: seen.append(node.path))

        assert seen == ["/a/b", "/a/c", "/a", "/x", "/"]

    def test_parent_first_order(self, sample_tree: FileTree) -> None:
        """Parents are visited before their descendants, siblings sorted."""
        seen: list[str] = []
        sample_tree.root.visit_depth_parent_first(lambda node: seen.append(node.path))

        assert seen == ["/", "/a", "/a/b", "/a/c", "/x"]

    def test_iter_subtree_is_parent_first(self, sample_tree: FileTree) -> None:
        """iter_subtree yields the same order as the parent-first visit."""
        paths = [node.path for node in sample_tree.root.iter_subtree()]

        assert paths == ["/", "/a", "/a/b", "/a/c", "/x"]

    def test_evaluator_prunes_subtree(self, sample_tree: FileTree) -> None:
        """A node rejected by the evaluator is skipped with its subtree."""
        seen: list[str] = []

        def keep(node: FileNode) -> bool:
            return node.name != "a"

        sample_tree.root.visit_depth_child_first(lambda node: seen.append(node.path), keep)
        assert seen == ["/x", "/"]

        seen.clear()
        sample_tree.root.visit_depth_parent_first(lambda node: seen.append(node.path), keep)
        assert seen == ["/", "/x"]

    def test_visitor_error_aborts(self, sample_tree: FileTree) -> None:
        """An exception raised by the visitor stops the traversal."""
        seen: list[str] = []

        def visitor(node: FileNode) -> None:
            seen.append(node.path)
            if node.name == "b":
                raise RuntimeError("stop")

        with pytest.raises(RuntimeError, match="stop"):
            sample_tree.root.visit_depth_child_first(visitor)
        assert seen == ["/a/b"]


class TestDiffLabels:
    """Tests for assign_diff_type and derive_diff_type."""

    def test_assign_never_lowers(self, sample_tree: FileTree) -> None:
        """assign_diff_type keeps the more severe label."""
        node = sample_tree.get_node("/x")
        node.assign_diff_type(DiffType.MODIFIED)
        node.assign_diff_type(DiffType.ADDED)

        assert node.data.diff_type == DiffType.MODIFIED

    def test_removed_propagates_to_subtree(self, sample_tree: FileTree) -> None:
        """REMOVED is applied to every descendant."""
        sample_tree.get_node("/a/b").assign_diff_type(DiffType.ADDED)
        sample_tree.get_node("/a").assign_diff_type(DiffType.REMOVED)

        for path in ("/a", "/a/b", "/a/c"):
            assert sample_tree.get_node(path).data.diff_type == DiffType.REMOVED
        assert sample_tree.get_node("/x").data.diff_type is None

    def test_derive_leaf_takes_label(self, sample_tree: FileTree) -> None:
        """A leaf takes the derived label directly."""
        node = sample_tree.get_node("/x")
        node.derive_diff_type(DiffType.UNMODIFIED)

        assert node.data.diff_type == DiffType.UNMODIFIED

    def test_derive_directory_with_changed_child(self, sample_tree: FileTree) -> None:
        """A directory with a changed child is MODIFIED."""
        sample_tree.get_node("/a/b").assign_diff_type(DiffType.UNMODIFIED)
        sample_tree.get_node("/a/c").assign_diff_type(DiffType.REMOVED)
        node = sample_tree.get_node("/a")
        node.derive_diff_type(DiffType.UNMODIFIED)

        assert node.data.diff_type == DiffType.MODIFIED

    def test_derive_directory_all_unmodified(self, sample_tree: FileTree) -> None:
        """A directory whose children are all unmodified stays unmodified."""
        sample_tree.get_node("/a/b").assign_diff_type(DiffType.UNMODIFIED)
        sample_tree.get_node("/a/c").assign_diff_type(DiffType.UNMODIFIED)
        node = sample_tree.get_node("/a")
        node.derive_diff_type(DiffType.UNMODIFIED)

        assert node.data.diff_type == DiffType.UNMODIFIED


class TestRenderLine:
    """Tests for single-line rendering helpers."""

    def test_middle_item(self, sample_tree: FileTree) -> None:
        """A non-last sibling uses the middle glyph."""
        line = sample_tree.get_node("/a").render_tree_line([], last=False, collapsed=False)
        assert line == "├── a\n"

    def test_last_collapsed_with_indent(self, sample_tree: FileTree) -> None:
        """Indent flags and the collapsed glyph are rendered."""
        node = sample_tree.get_node("/a/c")
        line = node.render_tree_line([False, True], last=True, collapsed=True)
        assert line == "│       └─⊕ c\n"

    def test_metadata_string(self, make_info: Callable[..., FileInfo]) -> None:
        """metadata_string shows permissions, owner and size."""
        tree = FileTree()
        node = tree.add_path("/f", make_info("f", 2048, uid=0, gid=0))

        assert node.metadata_string() == "-rw-r--r--     0:0        2.0 KB"
