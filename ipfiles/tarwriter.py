"""Writing node trees as tar archives."""

from __future__ import annotations

import posixpath
import tarfile
import time
from typing import BinaryIO

from ipfiles.linkfile import Symlink
from ipfiles.node import Directory, File, FilesError, Node, NotSupportedError


class PathOutsideRootError(FilesError):
    """Raised when an entry path would fall outside the archive root."""

    def __init__(
        self,
        message: str = (
            "relative UnixFS paths outside the root are not allowed, use CAR instead"
        ),
    ) -> None:
        super().__init__(message)


def _clean(path: str) -> str:
    cleaned = posixpath.normpath(path) if path else "."
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(base: str, name: str) -> str:
    parts = [part for part in (base, name) if part]
    if not parts:
        return ""
    return _clean("/".join(parts))


def validate_tar_file_path(base_dir: str, fpath: str) -> bool:
    """Return True if ``fpath`` stays inside the root given by ``base_dir``."""
    fpath = _clean(fpath)
    if base_dir and not fpath.startswith(base_dir):
        return False
    return not fpath.startswith("..")


class TarWriter:
    """Writes nodes into a tar stream."""

    def __init__(self, writer: BinaryIO) -> None:
        self.tar = tarfile.open(
            fileobj=writer, mode="w|", format=tarfile.PAX_FORMAT
        )
        self._base_dir: str | None = None

    def write_file(self, node: Node, fpath: str) -> None:
        """Add ``node`` to the archive under ``fpath``."""
        if self._base_dir is None:
            self._base_dir = fpath
        if not validate_tar_file_path(self._base_dir, fpath):
            raise PathOutsideRootError()

        if isinstance(node, Symlink):
            self._write_symlink(node.target, fpath)
        elif isinstance(node, File):
            self._write_regular(node, fpath)
        elif isinstance(node, Directory):
            self._write_dir(node, fpath)
        else:
            raise NotSupportedError(f"file type {type(node).__name__} is not supported")

    def _write_dir(self, directory: Directory, fpath: str) -> None:
        info = tarfile.TarInfo(fpath)
        info.type = tarfile.DIRTYPE
        info.mode = 0o777
        info.mtime = int(time.time())
        self.tar.addfile(info)
        for entry in directory.entries():
            self.write_file(entry.node, _join(fpath, entry.name))

    def _write_regular(self, file: File, fpath: str) -> None:
        info = tarfile.TarInfo(fpath)
        info.type = tarfile.REGTYPE
        info.size = file.size()
        info.mode = 0o644
        info.mtime = int(time.time())
        self.tar.addfile(info, file)

    def _write_symlink(self, target: str, fpath: str) -> None:
        info = tarfile.TarInfo(fpath)
        info.type = tarfile.SYMTYPE
        info.linkname = target
        info.mode = 0o777
        self.tar.addfile(info)

    def close(self) -> None:
        """Finish the archive; the underlying stream is left open."""
        self.tar.close()

    def __enter__(self) -> TarWriter:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()