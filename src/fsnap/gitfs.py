"""GitTreeFileSystem: a read-only filesystem capability over a git tree.

Lets :func:`fsnap.dirsnap.read_fs` and :func:`fsnap.filesnap.read_fs`
snapshot a committed tree straight out of a repository, without a
checkout.  Built on dulwich.
"""

from __future__ import annotations

import errno
import os
import stat
from pathlib import Path

from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo

from ._path import _split_segments
from ._types import DirEntry, FileType, PathLike, StatResult

__all__ = ["GitTreeFileSystem"]

GIT_FILEMODE_TREE = 0o040000
GIT_FILEMODE_COMMIT = 0o160000  # gitlink (submodule)


def _error(cls: type[OSError], code: int, path: PathLike) -> OSError:
    return cls(code, os.strerror(code), os.fspath(path))


def _resolve_ref(repo: Repo, ref: str | bytes) -> bytes:
    """Return the object SHA named by *ref* (ref name, short ref or full hex SHA)."""
    ref_bytes = ref.encode() if isinstance(ref, str) else ref
    for candidate in (ref_bytes, b"refs/heads/" + ref_bytes, b"refs/tags/" + ref_bytes):
        try:
            return repo.refs[candidate]
        except KeyError:
            continue
    if len(ref_bytes) == 40 and ref_bytes in repo.object_store:
        return ref_bytes
    raise KeyError(ref)


def _peel_to_tree(repo: Repo, sha: bytes) -> bytes:
    """Follow tags and commits until a tree is reached."""
    obj = repo.object_store[sha]
    for _ in range(50):  # safety limit
        if isinstance(obj, Tree):
            return obj.id
        if isinstance(obj, Tag):
            obj = repo.object_store[obj.object[1]]
        elif isinstance(obj, Commit):
            obj = repo.object_store[obj.tree]
        else:
            break
    raise ValueError(f"Cannot peel {sha.decode()} to a tree")


class GitTreeFileSystem:
    """Read-only view of a git tree object.

    Paths are relative to the tree root; ``""``, ``"."`` and ``"/"`` all
    name the root.  Symlinks and submodules are listed as files.  Every
    write operation raises :class:`PermissionError`.
    """

    def __init__(self, repo: Repo, tree_id: bytes):
        self._repo = repo
        self._tree_id = tree_id

    @classmethod
    def open(cls, path: str | Path, ref: str | bytes = "HEAD") -> GitTreeFileSystem:
        """Open the repository at *path* (bare or not) and view *ref*'s tree.

        *ref* may be a full ref name, a branch or tag name, or a 40-char
        hex SHA of a commit, tag or tree.  Raises :class:`KeyError` when
        the ref cannot be resolved.
        """
        repo = Repo(str(path))
        try:
            tree_id = _peel_to_tree(repo, _resolve_ref(repo, ref))
        except Exception:
            repo.close()
            raise
        return cls(repo, tree_id)

    def __repr__(self) -> str:
        return f"GitTreeFileSystem(tree={self._tree_id.decode()[:7]})"

    def __enter__(self) -> GitTreeFileSystem:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def tree_hash(self) -> str:
        """The 40-character hex SHA of the viewed tree."""
        return self._tree_id.decode()

    def close(self) -> None:
        """Release the underlying repository's resources."""
        self._repo.close()

    def _readonly_error(self, path: PathLike) -> PermissionError:
        return PermissionError(errno.EROFS, "Git tree is read-only", os.fspath(path))

    def _walk_to(self, path: PathLike) -> tuple[int, Tree | Blob | None]:
        """Walk the tree to *path*; return (filemode, object).

        The object is ``None`` for submodule entries, whose commits are not
        in this repository.
        """
        mode, obj = GIT_FILEMODE_TREE, self._repo.object_store[self._tree_id]
        for seg in _split_segments(path):
            if not isinstance(obj, Tree):
                raise _error(NotADirectoryError, errno.ENOTDIR, path)
            try:
                mode, sha = obj[seg.encode("utf-8", "surrogateescape")]
            except KeyError:
                raise _error(FileNotFoundError, errno.ENOENT, path) from None
            obj = None if mode == GIT_FILEMODE_COMMIT else self._repo.object_store[sha]
        return mode, obj

    # -- FileSystem protocol ------------------------------------------------

    def listdir(self, path: PathLike) -> list[DirEntry]:
        _, obj = self._walk_to(path)
        if not isinstance(obj, Tree):
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        return [
            DirEntry(entry.path.decode("utf-8", "surrogateescape"), stat.S_ISDIR(entry.mode))
            for entry in obj.iteritems()
        ]

    def read_bytes(self, path: PathLike) -> bytes:
        _, obj = self._walk_to(path)
        if isinstance(obj, Tree):
            raise _error(IsADirectoryError, errno.EISDIR, path)
        if obj is None:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        return obj.data

    def stat(self, path: PathLike) -> StatResult:
        _, obj = self._walk_to(path)
        if isinstance(obj, Tree):
            return StatResult(FileType.DIR)
        return StatResult(FileType.FILE, 0 if obj is None else len(obj.data))

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        raise self._readonly_error(path)

    def mkdir(self, path: PathLike) -> None:
        raise self._readonly_error(path)

    def makedirs(self, path: PathLike) -> None:
        raise self._readonly_error(path)
