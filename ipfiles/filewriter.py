"""Writing node trees to the local filesystem."""

from __future__ import annotations

import os
import shutil

from ipfiles.linkfile import Symlink
from ipfiles.node import Directory, File, FilesError, Node, NotSupportedError

_UNIX_INVALID_CHARS = "/\x00"
_WINDOWS_INVALID_CHARS = '<>:"/\\|?*\x00'
_WINDOWS_RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)


class InvalidDirectoryEntryError(FilesError):
    """Raised when a directory entry has a name that cannot be written."""

    def __init__(self, message: str = "invalid directory entry name") -> None:
        super().__init__(message)


class PathExistsError(FilesError):
    """Raised when the destination already exists."""

    def __init__(
        self, message: str = "path already exists and overwriting is not allowed"
    ) -> None:
        super().__init__(message)


def _is_valid_filename(filename: str, windows: bool) -> bool:
    if windows:
        if filename in _WINDOWS_RESERVED_NAMES:
            return False
        invalid = _WINDOWS_INVALID_CHARS
    else:
        invalid = _UNIX_INVALID_CHARS
    return not any(char in filename for char in invalid)


def is_valid_filename(filename: str) -> bool:
    """Return True if ``filename`` is usable as a single name on this platform."""
    return _is_valid_filename(filename, os.name == "nt")


def _create_new_file(path: str) -> int:
    flags = os.O_EXCL | os.O_CREAT | os.O_WRONLY
    flags |= getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_BINARY", 0)
    return os.open(path, flags, 0o666)


def write_to(node: Node, fpath: str | os.PathLike[str]) -> None:
    """Write ``node`` to the local filesystem at ``fpath``, which must not exist."""
    fpath = os.fspath(fpath)
    try:
        os.lstat(fpath)
    except FileNotFoundError:
        pass
    else:
        raise PathExistsError()

    if isinstance(node, Symlink):
        os.symlink(node.target, fpath)
    elif isinstance(node, File):
        with os.fdopen(_create_new_file(fpath), "wb") as out:
            shutil.copyfileobj(node, out)
    elif isinstance(node, Directory):
        os.mkdir(fpath, 0o777)
        for entry in node.entries():
            name = entry.name
            if name in ("", ".", "..") or not is_valid_filename(name):
                raise InvalidDirectoryEntryError()
            write_to(entry.node, os.path.join(fpath, name))
    else:
        raise NotSupportedError(
            f"file type {type(node).__name__} at {fpath!r} is not supported"
        )