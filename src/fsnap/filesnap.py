"""Snapshots of files and their contents.

A :class:`Files` maps slash-joined relative paths to file contents.
Directories are implicit: they appear only as path prefixes.

Typical use in a test::

    from fsnap import filesnap
    from fsnap.filesnap import Files

    def test_concat(tmp_path):
        Files({"a_0.txt": b"prefix", "a_1.txt": b"suffix"}).write(tmp_path)

        concat(tmp_path)

        assert filesnap.read(tmp_path) == Files({"a.txt": b"prefix\\nsuffix"})
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable, Mapping
from itertools import chain

from ._path import _join, _normalize_path
from ._types import FileSystem, PathLike
from .osfs import OSFileSystem

__all__ = ["Files", "read", "read_fs"]

log = logging.getLogger(__name__)


def _coerce_data(path: str, data) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Contents of {path!r} must be bytes or str, not {type(data).__name__}")


class Files(dict):
    """Snapshot of the files below a directory.

    Keys are relative paths using ``/`` (normalized on insertion; empty,
    ``.`` and ``..`` segments are rejected).  Values are ``bytes``; ``str``
    values are encoded as UTF-8.
    """

    def __init__(self, files: Mapping | Iterable[tuple[str, bytes | str]] = (), /, **kwargs):
        super().__init__()
        self.update(files, **kwargs)

    def __setitem__(self, path: str, data: bytes | str) -> None:
        path = _normalize_path(path)
        super().__setitem__(path, _coerce_data(path, data))

    def __getitem__(self, path: str) -> bytes:
        return super().__getitem__(_normalize_path(path))

    def __delitem__(self, path: str) -> None:
        super().__delitem__(_normalize_path(path))

    def __contains__(self, path) -> bool:
        try:
            return super().__contains__(_normalize_path(path))
        except (TypeError, ValueError):
            return False

    def get(self, path: str, default: bytes | None = None) -> bytes | None:
        try:
            return super().get(_normalize_path(path), default)
        except (TypeError, ValueError):
            return default

    def pop(self, path: str, *default):
        return super().pop(_normalize_path(path), *default)

    def update(self, files: Mapping | Iterable[tuple[str, bytes | str]] = (), /, **kwargs) -> None:
        """Insert *files* and *kwargs*, rejecting two keys for the same path."""
        items = files.items() if isinstance(files, Mapping) else files
        seen = set()
        for path, data in chain(items, kwargs.items()):
            path = _normalize_path(path)
            if path in seen:
                raise ValueError(f"Duplicate path after normalization: {path!r}")
            seen.add(path)
            self[path] = data

    def __ior__(self, other):
        self.update(other)
        return self

    def __or__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        new = Files(self)
        new.update(other)
        return new

    def __ror__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        new = Files(other)
        new.update(self)
        return new

    def setdefault(self, path: str, default: bytes | str = b"") -> bytes:
        if path not in self:
            self[path] = default
        return self[path]

    def copy(self) -> Files:
        return Files(self)

    def __repr__(self) -> str:
        return f"Files({dict.__repr__(self)})"

    def write(self, path: PathLike, *, fs: FileSystem | None = None) -> None:
        """Write every file of this snapshot below directory *path*.

        Missing parent directories are created.  Existing files are
        overwritten; a directory in place of a file raises (the backend's
        :class:`IsADirectoryError` on POSIX) and is left untouched.  The
        first error aborts the write and earlier files stay in place.
        """
        fs = OSFileSystem() if fs is None else fs
        for rel, data in self.items():
            target = _join(path, _normalize_path(rel))
            fs.makedirs(posixpath.dirname(target) or ".")
            fs.write_bytes(target, data)
            log.debug("wrote %s (%d bytes)", target, len(data))


def read(path: PathLike, depth: int = -1) -> Files:
    """Scan directory *path* on the local filesystem.

    See :func:`read_fs`.
    """
    return read_fs(OSFileSystem(), path, depth)


def read_fs(fs: FileSystem, path: PathLike, depth: int = -1) -> Files:
    """Scan directory *path* of *fs* and return its :class:`Files`.

    If *depth* < 0, all subdirectories are scanned.  Otherwise at most
    *depth* levels below *path* are descended into; files deeper than
    that are omitted entirely.

    Errors from *fs* propagate unchanged.  The raised :class:`OSError`
    carries the files read so far in its ``partial`` attribute.
    """
    files = Files()
    try:
        _read_into(files, fs, path, "", depth)
    except OSError as exc:
        exc.partial = files
        raise
    return files


def _read_into(files: Files, fs: FileSystem, root: PathLike, sub: str, depth: int) -> None:
    current = _join(root, sub) if sub else root
    try:
        entries = fs.listdir(current)
    except EOFError:
        # exhausted listing
        entries = []
    log.debug("scanned %s (%d entries)", current, len(entries))
    for e in entries:
        rel = f"{sub}/{e.name}" if sub else e.name
        if not e.is_dir:
            files[rel] = fs.read_bytes(_join(current, e.name))
        elif depth != 0:
            _read_into(files, fs, root, rel, depth - 1)
