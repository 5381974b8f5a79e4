"""Regular file nodes backed by a readable stream."""

from __future__ import annotations

import io
import os
from typing import BinaryIO

from ipfiles.node import File, FileInfo, NotSupportedError


class ReaderFile(File, FileInfo):
    """A regular file read from an arbitrary binary stream."""

    def __init__(
        self,
        reader: BinaryIO,
        *,
        abspath: str = "",
        stat: os.stat_result | None = None,
        size: int = -1,
        closable: bool = True,
    ) -> None:
        self._reader = reader
        self._abspath = abspath
        self._stat = stat
        self._fsize = size
        self._closable = closable

    def abs_path(self) -> str:
        return self._abspath

    def read(self, size: int = -1) -> bytes:
        data = self._reader.read(size)
        return b"" if data is None else data

    def close(self) -> None:
        if self._closable:
            self._reader.close()

    def stat(self) -> os.stat_result | None:
        return self._stat

    def size(self) -> int:
        if self._stat is None:
            if self._fsize >= 0:
                return self._fsize
            raise NotSupportedError()
        return self._stat.st_size

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        seek = getattr(self._reader, "seek", None)
        seekable = getattr(self._reader, "seekable", None)
        if seek is None or (seekable is not None and not seekable()):
            raise NotSupportedError()
        return seek(offset, whence)


def new_bytes_file(data: bytes | None) -> ReaderFile:
    """Create a file holding ``data`` in memory."""
    content = bytes(data or b"")
    return ReaderFile(io.BytesIO(content), size=len(content), closable=False)


def new_reader_file(reader: BinaryIO) -> ReaderFile:
    """Create a file of unknown size from a stream."""
    return new_reader_stat_file(reader, None)


def new_reader_stat_file(reader: BinaryIO, stat: os.stat_result | None) -> ReaderFile:
    """Create a file from a stream and an optional stat result."""
    closable = callable(getattr(reader, "close", None))
    return ReaderFile(reader, stat=stat, closable=closable)


def new_reader_path_file(
    path: str, reader: BinaryIO, stat: os.stat_result | None
) -> ReaderFile:
    """Create a file from a stream read from ``path`` on disk."""
    return ReaderFile(reader, abspath=os.path.abspath(path), stat=stat)