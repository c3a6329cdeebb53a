"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
import stat
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from layertree.filetree import FileInfo, FileTree

InfoFactory = Callable[..., FileInfo]


def file_info(
    name: str = "", size: int = 0, *, is_dir: bool = False, **kwargs: object
) -> FileInfo:
    """Build a FileInfo with a sensible mode for files and directories."""
    mode = kwargs.pop("mode", None)
    if mode is None:
        mode = (stat.S_IFDIR | 0o755) if is_dir else (stat.S_IFREG | 0o644)
    return FileInfo(name=name, size=size, mode=mode, is_dir=is_dir, **kwargs)  # type: ignore[arg-type]


def build_tree(entries: dict[str, int | None], name: str = "") -> FileTree:
    """Build a tree from a mapping of path to size (None for directories)."""
    tree = FileTree(name)
    for path, size in entries.items():
        leaf = path.rstrip("/").rsplit("/", 1)[-1]
        if size is None:
            tree.add_path(path, file_info(leaf, is_dir=True))
        else:
            tree.add_path(path, file_info(leaf, size))
    return tree


@pytest.fixture
def make_info() -> InfoFactory:
    """Factory for FileInfo payloads."""
    return file_info


@pytest.fixture
def tree_builder() -> Callable[..., FileTree]:
    """Factory building a tree from a path -> size mapping."""
    return build_tree


@pytest.fixture
def sample_tree() -> FileTree:
    """Tree with /a, /a/b, /a/c and /x."""
    return build_tree({"/a": None, "/a/b": 10, "/a/c": 5, "/x": 1}, name="sample")


@pytest.fixture
def layer_dirs(tmp_path: Path) -> list[Path]:
    """Two unpacked layers: a base layer and one that edits it.

    base:
        etc/hosts, etc/passwd, usr/bin/tool, var/cache/old
    app:
        etc/.wh.passwd, etc/hosts (rewritten), app/main.py,
        var/cache/.wh..wh..opq, var/cache/new
    """
    base = tmp_path / "base"
    (base / "etc").mkdir(parents=True)
    (base / "etc" / "hosts").write_text("127.0.0.1 localhost\n")
    (base / "etc" / "passwd").write_text("root:x:0:0\n")
    (base / "usr" / "bin").mkdir(parents=True)
    (base / "usr" / "bin" / "tool").write_text("#!/bin/sh\n")
    (base / "var" / "cache").mkdir(parents=True)
    (base / "var" / "cache" / "old").write_text("stale")

    app = tmp_path / "app"
    (app / "etc").mkdir(parents=True)
    (app / "etc" / ".wh.passwd").write_text("")
    (app / "etc" / "hosts").write_text("127.0.0.1 localhost app\n")
    (app / "app").mkdir()
    (app / "app" / "main.py").write_text("print('hi')\n")
    (app / "var" / "cache").mkdir(parents=True)
    (app / "var" / "cache" / ".wh..wh..opq").write_text("")
    (app / "var" / "cache" / "new").write_text("fresh")

    return [base, app]


@pytest.fixture
def config_path(tmp_path: Path) -> Iterator[Path]:
    """Point XDG_CONFIG_HOME at a temp dir and yield the config file path."""
    config_home = tmp_path / "config"
    with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(config_home)}):
        yield config_home / "layertree" / "config.toml"
