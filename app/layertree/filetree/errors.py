"""Exceptions raised by file tree operations."""


class FileTreeError(Exception):
    """Base exception for file tree errors.

    Attributes:
        path: The path the failing operation addressed.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class PathNotFoundError(FileTreeError):
    """Raised when a path does not exist in the tree."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Path does not exist: {path}", path)


class NodeCreationError(FileTreeError):
    """Raised when a path segment cannot be created as a node."""

    def __init__(self, path: str, segment: str) -> None:
        super().__init__(f"Could not add child node {segment!r} of {path}", path)
        self.segment = segment


class RootRemovalError(FileTreeError):
    """Raised when removing the root node is attempted."""

    def __init__(self) -> None:
        super().__init__("Cannot remove the root node", "/")


class StackingError(FileTreeError):
    """Raised when one node of an upper tree cannot be grafted.

    The underlying PathNotFoundError or NodeCreationError is chained
    as ``__cause__``.
    """
