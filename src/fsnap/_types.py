"""Data structures shared by the snapshot readers/writers and backends."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Protocol, runtime_checkable

__all__ = ["FileType", "DirEntry", "StatResult", "FileSystem", "PathLike"]

PathLike = str | os.PathLike[str]


class FileType(str, Enum):
    """Snapshot entry type.

    Members: ``FILE``, ``DIR``.
    """
    FILE = "file"
    DIR = "dir"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @classmethod
    def from_is_dir(cls, is_dir: bool) -> FileType:
        return cls.DIR if is_dir else cls.FILE


class DirEntry(NamedTuple):
    """An entry yielded by :meth:`FileSystem.listdir`."""

    name: str
    is_dir: bool

    @property
    def file_type(self) -> FileType:
        return FileType.from_is_dir(self.is_dir)


@dataclass(frozen=True, slots=True)
class StatResult:
    """Minimal stat result for a backend path.

    Attributes:
        file_type: :class:`FileType` enum value.
        size: Content size in bytes (0 for directories).
    """

    file_type: FileType
    size: int = 0

    @property
    def is_dir(self) -> bool:
        return self.file_type is FileType.DIR


@runtime_checkable
class FileSystem(Protocol):
    """Filesystem capability consumed by the snapshot readers and writers.

    Errors are classified by exception type: a missing path raises
    :class:`FileNotFoundError`, an existing one :class:`FileExistsError`.
    Type mismatches raise :class:`IsADirectoryError` or
    :class:`NotADirectoryError`.
    """

    def listdir(self, path: PathLike) -> list[DirEntry]:
        """Return the immediate entries of directory *path*."""
        ...

    def read_bytes(self, path: PathLike) -> bytes:
        """Return the full contents of file *path*."""
        ...

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        """Write *data* to *path*, creating or truncating the file."""
        ...

    def mkdir(self, path: PathLike) -> None:
        """Create a single directory; raise FileExistsError if present."""
        ...

    def makedirs(self, path: PathLike) -> None:
        """Create *path* and all missing ancestors; existing dirs are fine."""
        ...

    def stat(self, path: PathLike) -> StatResult:
        """Return type information for *path*."""
        ...
