import logging

from ._types import FileType, DirEntry, StatResult, FileSystem
from .dirsnap import Dirs, Entry
from .filesnap import Files
from .osfs import OSFileSystem
from .memfs import MemoryFileSystem
from .gitfs import GitTreeFileSystem
from . import dirsnap, filesnap

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Dirs", "Entry", "Files", "dirsnap", "filesnap",
    "FileType", "DirEntry", "StatResult", "FileSystem",
    "OSFileSystem", "MemoryFileSystem", "GitTreeFileSystem",
]
