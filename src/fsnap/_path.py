"""Path helpers shared by :mod:`fsnap.dirsnap` and :mod:`fsnap.filesnap`."""

from __future__ import annotations

import os
import posixpath

from ._types import PathLike


def _normalize_path(path: PathLike) -> str:
    """Normalize a relative path: strip leading/trailing slashes, reject bad segments."""
    path = os.fspath(path)
    if os.name == "nt":
        path = path.replace("\\", "/")
    path = path.strip("/")
    if not path:
        raise ValueError("Path must not be empty")
    segments = path.split("/")
    for seg in segments:
        if not seg:
            raise ValueError(f"Empty segment in path: {path!r}")
        if seg in (".", ".."):
            raise ValueError(f"Invalid path segment: {seg!r}")
    return "/".join(segments)


def _check_name(name: str) -> str:
    """Validate a single directory entry name."""
    if not isinstance(name, str):
        raise TypeError(f"Entry name must be str, not {type(name).__name__}")
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid entry name: {name!r}")
    if "/" in name or (os.name == "nt" and "\\" in name):
        raise ValueError(f"Entry name must not contain a separator: {name!r}")
    return name


def _join(base: PathLike, *parts: str) -> str:
    """Join *parts* onto *base* with forward slashes."""
    return posixpath.join(os.fspath(base), *parts)


def _split_segments(path: PathLike) -> tuple[str, ...]:
    """Split a backend path into segments, dropping ``.`` and empty ones.

    ``..`` is resolved lexically; climbing above the first segment raises
    :class:`ValueError`.
    """
    p = os.fspath(path)
    if os.name == "nt":
        p = p.replace("\\", "/")
    out: list[str] = []
    for seg in p.split("/"):
        if seg in ("", "."):
            continue
        if seg == "..":
            if not out:
                raise ValueError(f"Path escapes root: {p!r}")
            out.pop()
            continue
        out.append(seg)
    return tuple(out)
