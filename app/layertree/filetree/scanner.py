"""Layer scanner for unpacked image layers.

Walks a directory holding the extracted contents of one image layer
and builds a FileTree from the ``lstat`` metadata of every entry.
Whiteout files (``.wh.*``) are kept as ordinary entries so that
stacking can interpret them.
"""

import hashlib
import logging
import os
import stat
from collections.abc import Iterable
from pathlib import Path

from layertree.filetree.errors import FileTreeError
from layertree.filetree.models import FileInfo
from layertree.filetree.tree import FileTree

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class LayerScanner:
    """Builds a FileTree from an unpacked layer directory.

    Args:
        root: Directory holding the layer contents.
        with_digest: If True, hash regular files with sha256 so that
            content changes with identical size are detected.
        name: Tree name; defaults to the directory name.
    """

    def __init__(self, root: Path, *, with_digest: bool = False, name: str | None = None) -> None:
        self._root = root
        self._with_digest = with_digest
        self._name = name if name is not None else root.name

    def scan(self) -> FileTree:
        """Scan the layer directory.

        Returns:
            A tree with one node per entry below the layer root.

        Raises:
            NotADirectoryError: If the layer root is not a directory.
        """
        if not self._root.is_dir():
            raise NotADirectoryError(f"Layer is not a directory: {self._root}")

        tree = FileTree(self._name)
        for dirpath, dirnames, filenames in os.walk(self._root, onerror=self._on_walk_error):
            dirnames.sort()
            base = Path(dirpath)
            for name in (*dirnames, *sorted(filenames)):
                entry = base / name
                info = self._file_info(entry)
                if info is None:
                    continue
                try:
                    tree.add_path(entry.relative_to(self._root).as_posix(), info)
                except FileTreeError as e:
                    logger.warning("Skipping %s: %s", entry, e)
        return tree

    def _file_info(self, entry: Path) -> FileInfo | None:
        """Build the payload for one entry, or None if it cannot be read."""
        try:
            st = entry.lstat()
        except OSError as e:
            logger.warning("Cannot stat %s: %s", entry, e)
            return None

        is_dir = stat.S_ISDIR(st.st_mode)
        link_name = ""
        digest = None
        if stat.S_ISLNK(st.st_mode):
            try:
                link_name = os.readlink(entry)
            except OSError as e:
                logger.warning("Cannot read link %s: %s", entry, e)
        elif stat.S_ISREG(st.st_mode) and self._with_digest:
            digest = self._digest(entry)

        return FileInfo(
            name=entry.name,
            size=0 if is_dir else st.st_size,
            mode=st.st_mode,
            is_dir=is_dir,
            uid=st.st_uid,
            gid=st.st_gid,
            link_name=link_name,
            digest=digest,
        )

    def _digest(self, entry: Path) -> str | None:
        """Return the sha256 hex digest of a file, or None if unreadable."""
        hasher = hashlib.sha256()
        try:
            with open(entry, "rb") as f:
                while chunk := f.read(_CHUNK_SIZE):
                    hasher.update(chunk)
        except OSError as e:
            logger.warning("Cannot hash %s: %s", entry, e)
            return None
        return hasher.hexdigest()

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning("Cannot scan directory %s: %s", error.filename, error)


def scan_layers(paths: Iterable[Path], *, with_digest: bool = False) -> list[FileTree]:
    """Scan several layer directories, lowest layer first.

    Args:
        paths: Layer directories in stacking order.
        with_digest: Hash regular files (see LayerScanner).

    Returns:
        One tree per layer.
    """
    return [LayerScanner(path, with_digest=with_digest).scan() for path in paths]
