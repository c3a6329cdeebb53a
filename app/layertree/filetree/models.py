"""Data models for file tree nodes.

This module defines the payload carried by every node of a layer tree:
the file metadata supplied by the layer scanner, the diff classification
assigned by comparisons, and the view state owned by the UI.
"""

from __future__ import annotations

import stat
from dataclasses import dataclass, field
from enum import Enum


class DiffType(str, Enum):
    """Classification of a node between two compared tree states.

    Attributes:
        UNMODIFIED: Path exists in both states with identical metadata.
        ADDED: Path exists only in the upper (after) state.
        MODIFIED: Path exists in both states but its metadata (or, for a
            directory, anything below it) changed.
        REMOVED: Path exists only in the lower (before) state.
    """

    UNMODIFIED = "unmodified"
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"

    def __str__(self) -> str:
        return self.value

    @property
    def severity(self) -> int:
        """Rank used when escalating a label (higher wins)."""
        return _SEVERITY[self]

    @staticmethod
    def combine(current: DiffType | None, other: DiffType | None) -> DiffType | None:
        """Return the more severe of two labels.

        An unset label (None) ranks below every classification, so a node
        can only ever move up: ``UNMODIFIED < ADDED < MODIFIED < REMOVED``.

        Args:
            current: The label a node already carries.
            other: The newly computed label.

        Returns:
            Whichever label is more severe.
        """
        if current is None:
            return other
        if other is None:
            return current
        return other if other.severity > current.severity else current

    @staticmethod
    def merge(own: DiffType | None, child: DiffType | None) -> DiffType:
        """Fold a child's label into its directory's label.

        Equal labels are kept (a wholly added directory stays ADDED),
        any disagreement marks the directory MODIFIED.
        """
        own = own or DiffType.UNMODIFIED
        child = child or DiffType.UNMODIFIED
        if own == child:
            return own
        return DiffType.MODIFIED


_SEVERITY = {
    DiffType.UNMODIFIED: 0,
    DiffType.ADDED: 1,
    DiffType.MODIFIED: 2,
    DiffType.REMOVED: 3,
}


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Metadata describing one entry of an image layer.

    Attributes:
        name: Entry name (last path segment).
        size: Size in bytes.
        mode: Full ``st_mode`` value (file type bits plus permissions).
        is_dir: Whether the entry is a directory.
        uid: Owning user id.
        gid: Owning group id.
        link_name: Symlink target, empty when the entry is not a link.
        digest: Content identity hint (e.g. sha256 hex), None if unknown.
        exists: False for implicit parent directories that the layer does
            not actually contain.
    """

    name: str = ""
    size: int = 0
    mode: int = 0
    is_dir: bool = False
    uid: int = 0
    gid: int = 0
    link_name: str = ""
    digest: str | None = None
    exists: bool = True

    def __post_init__(self) -> None:
        """Validate file info after initialization."""
        if self.size < 0:
            msg = f"Size cannot be negative, got {self.size}"
            raise ValueError(msg)

    @classmethod
    def placeholder(cls, name: str = "") -> FileInfo:
        """Payload for an intermediate directory created implicitly."""
        return cls(name=name, mode=stat.S_IFDIR | 0o755, is_dir=True, exists=False)

    @property
    def permissions(self) -> str:
        """Return an ``ls -l`` style mode string (e.g. ``drwxr-xr-x``)."""
        mode = self.mode
        if self.is_dir and not stat.S_ISDIR(mode):
            mode |= stat.S_IFDIR
        return stat.filemode(mode)

    @property
    def size_human(self) -> str:
        """Return human-readable size string."""
        size = float(self.size)
        for unit in ("B", "KB", "MB", "GB"):
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} TB"

    def compare(self, other: FileInfo) -> DiffType:
        """Compare two payloads for the same path.

        Returns:
            UNMODIFIED when every compared attribute matches, else MODIFIED.
        """
        if (
            self.size == other.size
            and self.mode == other.mode
            and self.is_dir == other.is_dir
            and self.uid == other.uid
            and self.gid == other.gid
            and self.link_name == other.link_name
            and self.digest == other.digest
        ):
            return DiffType.UNMODIFIED
        return DiffType.MODIFIED


@dataclass(slots=True)
class ViewInfo:
    """Presentation state of a node, mutated by the UI between renders."""

    collapsed: bool = False
    hidden: bool = False


@dataclass(slots=True)
class NodeData:
    """Everything a node carries besides its structure.

    Attributes:
        file_info: Metadata from the layer.
        diff_type: Classification, None until a comparison labels the node.
        view_info: Collapsed/hidden flags.
    """

    file_info: FileInfo = field(default_factory=FileInfo)
    diff_type: DiffType | None = None
    view_info: ViewInfo = field(default_factory=ViewInfo)

    def copy(self) -> NodeData:
        """Return a copy that shares nothing mutable with this one."""
        return NodeData(
            file_info=self.file_info,
            diff_type=self.diff_type,
            view_info=ViewInfo(
                collapsed=self.view_info.collapsed,
                hidden=self.view_info.hidden,
            ),
        )
