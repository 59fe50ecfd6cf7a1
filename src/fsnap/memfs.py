"""MemoryFileSystem: an in-memory filesystem capability.

Useful as a fake in tests and for building snapshots without touching
disk.  Error behavior follows a POSIX OS filesystem, so code exercised
against it sees the same exception types as against :class:`OSFileSystem`.
"""

from __future__ import annotations

import errno
import os
from collections.abc import Mapping

from ._path import _split_segments
from ._types import DirEntry, FileType, PathLike, StatResult

__all__ = ["MemoryFileSystem"]

_Node = dict | bytes


def _error(cls: type[OSError], code: int, path: PathLike) -> OSError:
    return cls(code, os.strerror(code), os.fspath(path))


def _seed(mapping: Mapping) -> dict:
    node: dict[str, _Node] = {}
    for name, value in mapping.items():
        if isinstance(value, Mapping):
            node[name] = _seed(value)
        elif isinstance(value, str):
            node[name] = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray, memoryview)):
            node[name] = bytes(value)
        else:
            raise TypeError(f"Unsupported value for {name!r}: {type(value).__name__}")
    return node


def _unseed(node: dict) -> dict:
    return {name: _unseed(v) if isinstance(v, dict) else v for name, v in node.items()}


class MemoryFileSystem:
    """A filesystem held entirely in nested dicts.

    Directories are dicts, files are ``bytes``.  Absolute and relative
    paths address the same tree; ``..`` is resolved lexically.
    """

    def __init__(self):
        self._root: dict[str, _Node] = {}

    def __repr__(self) -> str:
        return f"MemoryFileSystem({len(self._root)} top-level entries)"

    @classmethod
    def from_dict(cls, mapping: Mapping) -> MemoryFileSystem:
        """Build a filesystem from a nested mapping.

        Mappings become directories; ``bytes`` or ``str`` (UTF-8) values
        become files.
        """
        fs = cls()
        fs._root = _seed(mapping)
        return fs

    def to_dict(self) -> dict:
        """Return a deep copy of the tree as nested dicts of ``bytes``."""
        return _unseed(self._root)

    # -- lookups ------------------------------------------------------------

    def _resolve(self, path: PathLike) -> _Node:
        node: _Node = self._root
        for seg in _split_segments(path):
            if not isinstance(node, dict):
                raise _error(NotADirectoryError, errno.ENOTDIR, path)
            try:
                node = node[seg]
            except KeyError:
                raise _error(FileNotFoundError, errno.ENOENT, path) from None
        return node

    def _parent(self, path: PathLike) -> tuple[dict, str]:
        """Return (parent dir node, leaf name) for *path*."""
        segments = _split_segments(path)
        if not segments:
            raise _error(IsADirectoryError, errno.EISDIR, path)
        parent = self._resolve("/".join(segments[:-1]))
        if not isinstance(parent, dict):
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        return parent, segments[-1]

    # -- FileSystem protocol ------------------------------------------------

    def listdir(self, path: PathLike) -> list[DirEntry]:
        node = self._resolve(path)
        if not isinstance(node, dict):
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        return [DirEntry(name, isinstance(v, dict)) for name, v in node.items()]

    def read_bytes(self, path: PathLike) -> bytes:
        node = self._resolve(path)
        if isinstance(node, dict):
            raise _error(IsADirectoryError, errno.EISDIR, path)
        return node

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        parent, name = self._parent(path)
        if isinstance(parent.get(name), dict):
            raise _error(IsADirectoryError, errno.EISDIR, path)
        parent[name] = bytes(data)

    def mkdir(self, path: PathLike) -> None:
        segments = _split_segments(path)
        if not segments:
            raise _error(FileExistsError, errno.EEXIST, path)
        parent, name = self._parent(path)
        if name in parent:
            raise _error(FileExistsError, errno.EEXIST, path)
        parent[name] = {}

    def makedirs(self, path: PathLike) -> None:
        segments = _split_segments(path)
        node: dict = self._root
        for i, seg in enumerate(segments):
            child = node.setdefault(seg, {})
            if not isinstance(child, dict):
                if i == len(segments) - 1:
                    raise _error(FileExistsError, errno.EEXIST, path)
                raise _error(NotADirectoryError, errno.ENOTDIR, path)
            node = child

    def stat(self, path: PathLike) -> StatResult:
        node = self._resolve(path)
        if isinstance(node, dict):
            return StatResult(FileType.DIR)
        return StatResult(FileType.FILE, len(node))
