"""OSFileSystem: the filesystem capability bound to the live OS."""

from __future__ import annotations

import logging
import os
import stat

from ._types import DirEntry, FileType, PathLike, StatResult

__all__ = ["OSFileSystem"]

log = logging.getLogger(__name__)

DEFAULT_DIR_MODE = 0o700
DEFAULT_FILE_MODE = 0o600


class OSFileSystem:
    """Filesystem capability backed by :mod:`os`.

    New directories are created with *dir_mode* and new files with
    *file_mode*, both subject to the process umask.  Symlinks are not
    followed when listing, so a link to a directory is reported as a file.
    """

    def __init__(self, *, dir_mode: int = DEFAULT_DIR_MODE, file_mode: int = DEFAULT_FILE_MODE):
        self.dir_mode = dir_mode
        self.file_mode = file_mode

    def __repr__(self) -> str:
        return f"OSFileSystem(dir_mode={self.dir_mode:#o}, file_mode={self.file_mode:#o})"

    def listdir(self, path: PathLike) -> list[DirEntry]:
        with os.scandir(path) as it:
            return [DirEntry(e.name, e.is_dir(follow_symlinks=False)) for e in it]

    def read_bytes(self, path: PathLike) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)
        fd = os.open(path, flags, self.file_mode)
        with open(fd, "wb") as f:
            f.write(data)
        log.debug("wrote %d bytes to %s", len(data), os.fspath(path))

    def mkdir(self, path: PathLike) -> None:
        os.mkdir(path, self.dir_mode)
        log.debug("created directory %s", os.fspath(path))

    def makedirs(self, path: PathLike) -> None:
        os.makedirs(path, self.dir_mode, exist_ok=True)

    def stat(self, path: PathLike) -> StatResult:
        st = os.stat(path)
        if stat.S_ISDIR(st.st_mode):
            return StatResult(FileType.DIR)
        return StatResult(FileType.FILE, st.st_size)
