"""Snapshots of directory structure: which files and folders exist.

A :class:`Dirs` maps entry names to :class:`Entry` values: a file marker
or a nested directory.  Contents are not recorded (see
:mod:`fsnap.filesnap` for that).

Typical use in a test::

    from fsnap import dirsnap
    from fsnap.dirsnap import Dirs

    def test_purge(tmp_path):
        Dirs({
            "file": None,
            "dir": {"subfile": None, "subdir": {}},
        }).write(tmp_path)

        purge(tmp_path)

        assert dirsnap.read(tmp_path) == Dirs({"dir": {"subdir": {}}})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ._path import _check_name, _join
from ._types import FileSystem, FileType, PathLike
from .osfs import OSFileSystem

__all__ = ["Entry", "Dirs", "read", "read_fs"]

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Entry:
    """One entry of a :class:`Dirs` snapshot.

    A file entry has ``children is None``; a directory entry always
    carries a :class:`Dirs` (empty for an empty or unscanned directory).
    Use :meth:`file` and :meth:`dir` rather than the raw constructor.
    Entries compare by value but are not hashable.
    """

    kind: FileType
    children: Dirs | None = None

    __hash__ = None

    def __post_init__(self):
        kind = FileType(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind is FileType.FILE:
            if self.children is not None:
                raise ValueError("File entries cannot have children")
        elif not isinstance(self.children, Dirs):
            object.__setattr__(self, "children", Dirs(self.children or {}))

    def __repr__(self) -> str:
        if self.kind is FileType.FILE:
            return "Entry.file()"
        return f"Entry.dir({self.children!r})"

    @classmethod
    def file(cls) -> Entry:
        return cls(FileType.FILE)

    @classmethod
    def dir(cls, children: Mapping | None = None) -> Entry:
        return cls(FileType.DIR, children)

    @property
    def is_dir(self) -> bool:
        return self.kind is FileType.DIR


def _coerce(value) -> Entry:
    """Turn a literal value into an :class:`Entry`.

    ``None`` is a file, a mapping is a directory.
    """
    if isinstance(value, Entry):
        return value
    if value is None:
        return Entry.file()
    if isinstance(value, Mapping):
        return Entry.dir(value)
    raise TypeError(f"Expected None, a mapping or an Entry, not {type(value).__name__}")


class Dirs(dict):
    """Nested snapshot of a directory's files and folders.

    Keys are entry names.  Values are :class:`Entry` objects; on insertion
    ``None`` is accepted for a file and any mapping for a subdirectory, so
    fixtures can be written as plain nested literals.
    """

    def __init__(self, entries: Mapping | Iterable[tuple[str, object]] = (), /, **kwargs):
        super().__init__()
        self.update(entries, **kwargs)

    def __setitem__(self, name: str, value) -> None:
        super().__setitem__(_check_name(name), _coerce(value))

    def update(self, entries: Mapping | Iterable[tuple[str, object]] = (), /, **kwargs) -> None:
        items = entries.items() if isinstance(entries, Mapping) else entries
        for name, value in items:
            self[name] = value
        for name, value in kwargs.items():
            self[name] = value

    def __ior__(self, other):
        self.update(other)
        return self

    def __or__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        new = Dirs(self)
        new.update(other)
        return new

    def __ror__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        new = Dirs(other)
        new.update(self)
        return new

    def setdefault(self, name: str, default=None) -> Entry:
        if name not in self:
            self[name] = default
        return self[name]

    def copy(self) -> Dirs:
        return Dirs(self)

    def __repr__(self) -> str:
        return f"Dirs({dict.__repr__(self)})"

    def to_dict(self) -> dict:
        """Return the snapshot as nested plain dicts, ``None`` marking files."""
        return {
            name: entry.children.to_dict() if entry.is_dir else None
            for name, entry in self.items()
        }

    def write(self, path: PathLike, *, fs: FileSystem | None = None) -> None:
        """Create the files and folders of this snapshot inside *path*.

        Files are created empty.  An existing file or folder at a target
        path is accepted when it has the same type; otherwise the
        backend's error propagates.  The first error aborts the write and
        whatever was created before it stays in place.
        """
        _write(OSFileSystem() if fs is None else fs, self, path)


def _has_type(fs: FileSystem, path: str, want_dir: bool) -> bool:
    try:
        return fs.stat(path).is_dir == want_dir
    except OSError:
        return False


def _write(fs: FileSystem, dirs: Dirs, path: PathLike) -> None:
    for name, entry in dirs.items():
        target = _join(path, _check_name(name))
        if not entry.is_dir:
            try:
                fs.write_bytes(target, b"")
            except FileExistsError:
                if not _has_type(fs, target, want_dir=False):
                    raise
        else:
            try:
                fs.mkdir(target)
            except FileExistsError:
                if not _has_type(fs, target, want_dir=True):
                    raise
            _write(fs, entry.children, target)
        log.debug("ensured %s %s", entry.kind, target)


def read(path: PathLike, depth: int = -1) -> Dirs:
    """Scan directory *path* on the local filesystem.

    See :func:`read_fs`.
    """
    return read_fs(OSFileSystem(), path, depth)


def read_fs(fs: FileSystem, path: PathLike, depth: int = -1) -> Dirs:
    """Scan directory *path* of *fs* and return its :class:`Dirs` tree.

    If *depth* < 0, all subdirectories are scanned.  Otherwise at most
    *depth* levels below *path* are descended into; directories at the
    limit are recorded as empty.

    Errors from *fs* propagate unchanged (a missing *path* raises
    :class:`FileNotFoundError`).  An :class:`OSError` raised below the top
    level carries the snapshot built so far in its ``partial`` attribute.
    """
    snap = Dirs()
    try:
        entries = fs.listdir(path)
    except EOFError:
        # exhausted listing
        entries = []
    log.debug("scanned %s (%d entries)", path, len(entries))
    for e in entries:
        if not e.is_dir:
            snap[e.name] = Entry.file()
        elif depth == 0:
            snap[e.name] = Entry.dir()
        else:
            try:
                children = read_fs(fs, _join(path, e.name), depth - 1)
            except OSError as exc:
                child = getattr(exc, "partial", None)
                snap[e.name] = Entry.dir(child if isinstance(child, Dirs) else None)
                exc.partial = snap
                raise
            snap[e.name] = Entry.dir(children)
    return snap
