"""Core node types: regular files, directories and directory entries."""

from __future__ import annotations

import abc
import os
from collections.abc import Iterator
from typing import Protocol, runtime_checkable


class FilesError(Exception):
    """Base class for errors raised by this package."""


class NotDirectoryError(FilesError):
    """Raised when a directory was expected."""

    def __init__(self, message: str = "file isn't a directory") -> None:
        super().__init__(message)


class NotReaderError(FilesError):
    """Raised when a regular file was expected."""

    def __init__(self, message: str = "file isn't a regular file") -> None:
        super().__init__(message)


class NotSupportedError(FilesError):
    """Raised when a node does not support the requested operation."""

    def __init__(self, message: str = "operation not supported") -> None:
        super().__init__(message)


class Node(abc.ABC):
    """Common base for files, directories and other special files."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release any resources held by the node."""

    @abc.abstractmethod
    def size(self) -> int:
        """Return the size in bytes; for directories, the total of the tree."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class File(Node):
    """A regular file that can be read and seeked."""

    @abc.abstractmethod
    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes; an empty result means end of file."""

    @abc.abstractmethod
    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the read position and return the new absolute position."""


@runtime_checkable
class DirEntry(Protocol):
    """A named reference to a node inside a directory."""

    name: str
    node: Node


class Directory(Node):
    """A node that links to any number of other nodes."""

    @abc.abstractmethod
    def entries(self) -> Iterator[DirEntry]:
        """Iterate over the entries; may only be called once for some directories."""

    def __iter__(self) -> Iterator[DirEntry]:
        return iter(self.entries())


class FileInfo(Node):
    """A node backed by something with a known location."""

    @abc.abstractmethod
    def abs_path(self) -> str:
        """Return the full real path of the file."""

    @abc.abstractmethod
    def stat(self) -> os.stat_result | None:
        """Return the stat result of the file, or None when unknown."""


def to_file(node: Node | None) -> File | None:
    """Return ``node`` if it is a regular file, otherwise None."""
    return node if isinstance(node, File) else None


def to_dir(node: Node | None) -> Directory | None:
    """Return ``node`` if it is a directory, otherwise None."""
    return node if isinstance(node, Directory) else None


def file_from_entry(entry: DirEntry) -> File | None:
    """Return the entry's node if it is a regular file, otherwise None."""
    return to_file(entry.node)


def dir_from_entry(entry: DirEntry) -> Directory | None:
    """Return the entry's node if it is a directory, otherwise None."""
    return to_dir(entry.node)