"""Nodes read lazily from paths on the local filesystem."""

from __future__ import annotations

import os
import stat as stat_mod
from collections.abc import Iterator

from ipfiles.filter import Filter, new_filter
from ipfiles.linkfile import new_link_file
from ipfiles.node import DirEntry, Directory, FilesError, Node
from ipfiles.readerfile import new_reader_path_file
from ipfiles.slicedirectory import FileEntry


class SerialDirectory(Directory):
    """A directory on disk whose children are opened one at a time."""

    def __init__(
        self,
        path: str,
        files: list[tuple[str, os.stat_result]],
        stat: os.stat_result,
        filter: Filter,
    ) -> None:
        self.path = path
        self._files = files
        self._stat = stat
        self.filter = filter

    def entries(self) -> Iterator[DirEntry]:
        for name, info in self._files:
            child_path = os.path.join(self.path, name).replace(os.sep, "/")
            if self.filter.should_exclude(child_path):
                continue
            yield FileEntry(name, new_serial_file_with_filter(child_path, self.filter, info))

    def close(self) -> None:
        """Closing a directory has no effect."""

    def stat(self) -> os.stat_result:
        return self._stat

    def size(self) -> int:
        if not stat_mod.S_ISDIR(self._stat.st_mode):
            raise FilesError("serialFile is not a directory")
        return self._disk_usage(self.path)

    def _disk_usage(self, path: str) -> int:
        info = os.lstat(path)
        if self.filter.should_exclude(path):
            return 0
        if stat_mod.S_ISREG(info.st_mode):
            return info.st_size
        if stat_mod.S_ISDIR(info.st_mode):
            return sum(
                self._disk_usage(os.path.join(path, name))
                for name in sorted(os.listdir(path))
            )
        return 0


def new_serial_file(
    path: str | os.PathLike[str],
    include_hidden: bool,
    stat: os.stat_result | None = None,
) -> Node:
    """Open ``path`` as a node, leaving out hidden files unless asked not to."""
    return new_serial_file_with_filter(path, new_filter("", None, include_hidden), stat)


def new_serial_file_with_filter(
    path: str | os.PathLike[str],
    filter: Filter,
    stat: os.stat_result | None = None,
) -> Node:
    """Open ``path`` as a file, directory or symlink node using ``filter``."""
    path = os.fspath(path)
    if stat is None:
        stat = os.lstat(path)
    mode = stat.st_mode
    if stat_mod.S_ISREG(mode):
        return new_reader_path_file(path, open(path, "rb"), stat)
    if stat_mod.S_ISDIR(mode):
        with os.scandir(path) as listing:
            entries = sorted(listing, key=lambda entry: entry.name)
            files = [(entry.name, entry.stat(follow_symlinks=False)) for entry in entries]
        return SerialDirectory(path, files, stat, filter)
    if stat_mod.S_ISLNK(mode):
        return new_link_file(os.readlink(path), stat)
    raise FilesError(
        f"unrecognized file type for {path}: {stat_mod.filemode(mode)}"
    )