from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides the filesystem collaborator consumed by the snapshot builders: an
abstract interface plus a real-disk backend and an in-memory backend used by
tests and embedders. Failures surface as builtin OSError subclasses so callers
can tell "not found" apart from other I/O problems.
"""

import errno
import os
import posixpath
import stat
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Union

# -----------------------------------------------------------------------------
# DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DirEntry:
    """
    A single directory listing entry.

    Attributes:
        path: Full path of the entry.
    """
    path: str


@dataclass(frozen=True)
class FileMetadata:
    """
    Minimal stat information needed by the dispatcher.

    Attributes:
        is_dir: True for directories, False for regular files.
    """
    is_dir: bool

    @property
    def is_file(self) -> bool:
        return not self.is_dir

# -----------------------------------------------------------------------------
# ABSTRACT INTERFACE
# -----------------------------------------------------------------------------

class FileSystem(ABC):
    """
    Read-only filesystem abstraction used during snapshot construction.
    """

    @abstractmethod
    def read_dir(self, path: str) -> List[DirEntry]:
        """
        List the direct children of a directory, sorted by path.

        Args:
            path: Directory to enumerate.

        Returns:
            List[DirEntry]: One entry per child.
        """

    @abstractmethod
    def read(self, path: str) -> bytes:
        """
        Read a whole file as bytes.

        Raises:
            FileNotFoundError: If the file does not exist.
            OSError: For any other read failure.
        """

    @abstractmethod
    def metadata(self, path: str) -> Optional[FileMetadata]:
        """Stat a path, returning None when nothing exists there."""

    def read_to_string_lf_normalized(self, path: str) -> str:
        """
        Read a UTF-8 text file with all line endings collapsed to LF.

        Args:
            path: File to read.

        Returns:
            str: Decoded text where CRLF and lone CR became LF.

        Raises:
            OSError: If the file cannot be read or is not valid UTF-8.
        """
        data = self.read(path)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise OSError(
                errno.EILSEQ, f"File did not contain valid UTF-8: {e}", path
            ) from e
        return normalize_line_endings(text)


def normalize_line_endings(text: str) -> str:
    """Collapse CRLF and CR line terminators into LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")

# -----------------------------------------------------------------------------
# REAL DISK BACKEND
# -----------------------------------------------------------------------------

class RealFileSystem(FileSystem):
    """Filesystem backed by the operating system."""

    def read_dir(self, path: str) -> List[DirEntry]:
        with os.scandir(path) as it:
            entries = [DirEntry(path=e.path) for e in it]
        entries.sort(key=lambda e: e.path)
        return entries

    def read(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def metadata(self, path: str) -> Optional[FileMetadata]:
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return None
        return FileMetadata(is_dir=stat.S_ISDIR(st.st_mode))

# -----------------------------------------------------------------------------
# IN-MEMORY BACKEND
# -----------------------------------------------------------------------------

_DIRECTORY = object()

TreeSpec = Mapping[str, Union[str, bytes, "TreeSpec"]]


class InMemoryFileSystem(FileSystem):
    """
    Filesystem held entirely in memory, using POSIX-style absolute paths.

    Parent directories are created implicitly when files are loaded.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, object] = {"/": _DIRECTORY}

    # --- Loading helpers -------------------------------------------------------

    def load_file(self, path: str, contents: Union[str, bytes]) -> None:
        """Create or replace a file, creating missing parent directories."""
        key = _normalize(path)
        self._ensure_dir(posixpath.dirname(key))
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        self._nodes[key] = bytes(contents)

    def load_dir(self, path: str) -> None:
        """Create an empty directory (and its parents) if missing."""
        self._ensure_dir(_normalize(path))

    def load_tree(self, path: str, tree: TreeSpec) -> None:
        """
        Load a nested mapping where str/bytes values are files and mappings
        are directories.

        Args:
            path: Directory that will hold the tree.
            tree: Child name to file contents or nested mapping.
        """
        root = _normalize(path)
        self._ensure_dir(root)
        for name, value in tree.items():
            child = posixpath.join(root, name)
            if isinstance(value, (str, bytes)):
                self.load_file(child, value)
            else:
                self.load_tree(child, value)

    def remove(self, path: str) -> None:
        """Remove a file or a directory subtree."""
        key = _normalize(path)
        if key not in self._nodes:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        prefix = key.rstrip("/") + "/"
        for existing in [k for k in self._nodes if k == key or k.startswith(prefix)]:
            del self._nodes[existing]

    # --- FileSystem API --------------------------------------------------------

    def read_dir(self, path: str) -> List[DirEntry]:
        key = _normalize(path)
        node = self._nodes.get(key)
        if node is None:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        if node is not _DIRECTORY:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)

        children = [
            DirEntry(path=candidate)
            for candidate in self._nodes
            if candidate != key and posixpath.dirname(candidate) == key
        ]
        children.sort(key=lambda e: e.path)
        return children

    def read(self, path: str) -> bytes:
        node = self._nodes.get(_normalize(path))
        if node is None:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        if node is _DIRECTORY:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        return node  # type: ignore[return-value]

    def metadata(self, path: str) -> Optional[FileMetadata]:
        node = self._nodes.get(_normalize(path))
        if node is None:
            return None
        return FileMetadata(is_dir=node is _DIRECTORY)

    # --- Private helpers -------------------------------------------------------

    def _ensure_dir(self, key: str) -> None:
        existing = self._nodes.get(key)
        if existing is _DIRECTORY:
            return
        if existing is not None:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", key)
        self._ensure_dir(posixpath.dirname(key))
        self._nodes[key] = _DIRECTORY


def _normalize(path: str) -> str:
    """Canonicalize a path into the absolute POSIX form used as a key."""
    p = posixpath.normpath("/" + path.replace("\\", "/").lstrip("/"))
    return "/" if p in ("/", "//") else p
