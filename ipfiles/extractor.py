"""Extraction of tar archives holding a single file, symlink or directory tree."""

from __future__ import annotations

import os
import stat as stat_mod
import tarfile
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from typing import BinaryIO

from ipfiles.node import FilesError
from ipfiles.sanitize import (
    is_null_device,
    validate_path_component,
    validate_platform_path,
)

_MULTIPLE_ROOTS = (
    "contains more than one root or the root directory is not the first entry"
)


class ExtractError(FilesError):
    """Raised when an archive cannot be extracted."""


class InvalidRootError(ExtractError):
    """Raised when the archive does not have a single valid root."""


class TraverseSymlinkError(ExtractError):
    """Raised when an entry would be extracted through a symlink."""

    def __init__(self, message: str = "cannot traverse symlinks") -> None:
        super().__init__(message)


class ExtractedDirToSymlinkError(ExtractError):
    """Raised when a directory entry resolves to a symlink on disk."""

    def __init__(self, message: str = "cannot extract to symlink") -> None:
        super().__init__(message)


def validate_tar_path(tar_path: str) -> None:
    """Raise ExtractError if ``tar_path`` is empty, absolute or not clean."""
    if not tar_path:
        raise ExtractError("path is empty")
    if tar_path.startswith("/"):
        raise ExtractError(f"{tar_path!r} : path starts with '/'")
    for element in tar_path.split("/"):
        if element in ("", ".", ".."):
            raise ExtractError(f"{tar_path!r} : path contains {element!r}")


def get_relative_path(root_name: str, tar_path: str) -> str:
    """Return ``tar_path`` relative to the root; raise if it lies outside it."""
    prefix = root_name + "/"
    if not tar_path.startswith(prefix):
        raise InvalidRootError(_MULTIPLE_ROOTS)
    return tar_path[len(prefix):]


def copy_with_progress(
    dst: BinaryIO, src: BinaryIO, callback: Callable[[int], object] | None
) -> None:
    """Copy ``src`` to ``dst`` in 4096-byte reads, reporting each read's length."""
    while chunk := src.read(4096):
        if callback is not None:
            callback(len(chunk))
        dst.write(chunk)


def _remove(path: str) -> None:
    """Remove a file, symlink or empty directory; a missing path is fine."""
    try:
        info = os.lstat(path)
    except FileNotFoundError:
        return
    if stat_mod.S_ISDIR(info.st_mode):
        os.rmdir(path)
    else:
        os.remove(path)


@dataclass
class Extractor:
    """Extracts tar archives to ``path``.

    A single file or symlink is extracted with ``cp``-like semantics; otherwise
    the first entry must be a root directory holding every other entry.
    """

    path: str
    progress: Callable[[int], object] | None = None

    def extract(self, reader: BinaryIO) -> None:
        """Extract the tar stream ``reader`` to the file system."""
        if is_null_device(self.path):
            return
        try:
            tar = tarfile.open(fileobj=reader, mode="r|")
        except tarfile.ReadError as exc:
            if str(exc) == "empty file":
                raise ExtractError("empty tar file") from exc
            raise ExtractError(f"reading tar: {exc}") from exc
        with tar:
            self._extract_members(tar)

    def _extract_members(self, tar: tarfile.TarFile) -> None:
        header = tar.next()
        if header is None:
            raise ExtractError("empty tar file")

        root_name = header.name
        if "/" in root_name:
            raise InvalidRootError(
                f"root name contains multiple components : {root_name!r}"
            )
        if root_name in ("", ".", ".."):
            raise InvalidRootError(f"invalid root path: {root_name!r}")

        root_output = os.path.normpath(self.path)
        validate_platform_path(root_output)

        first_was_dir = False
        if header.isdir():
            first_was_dir = True
            self._extract_dir(root_output)
        elif header.isreg() or header.issym():
            try:
                root_is_dir = stat_mod.S_ISDIR(os.lstat(root_output).st_mode)
            except FileNotFoundError:
                root_is_dir = False
            output = root_output
            if root_is_dir:
                validate_path_component(root_name)
                output = os.path.join(root_output, root_name)
            if header.isreg():
                self._extract_file(output, tar, header)
            else:
                self._extract_symlink(output, header)
        else:
            raise ExtractError(f"unrecognized tar header type: {header.type[0]}")

        while (header := tar.next()) is not None:
            if not first_was_dir:
                raise InvalidRootError(
                    "the root was not a directory and the tar has multiple entries"
                )
            validate_tar_path(header.name)
            rel_path = get_relative_path(root_name, header.name)
            output = self._output_path(root_output, rel_path)

            try:
                rel = os.path.relpath(output, root_output)
            except ValueError:
                rel = "."
            if rel == ".":
                raise InvalidRootError(_MULTIPLE_ROOTS)
            if ".." in rel.replace(os.sep, "/").split("/"):
                raise ExtractError("relative path contains '..'")

            if header.isdir():
                self._extract_dir(output)
            elif header.isreg():
                self._extract_file(output, tar, header)
            elif header.issym():
                self._extract_symlink(output, header)
            else:
                raise ExtractError(f"unrecognized tar header type: {header.type[0]}")

    def _output_path(self, base: str, relative: str) -> str:
        elements = relative.split("/")
        platform_path = base
        for index, element in enumerate(elements):
            validate_path_component(element)
            platform_path = os.path.join(platform_path, element)
            # The last element is replaced by the extraction itself.
            if index == len(elements) - 1:
                break
            mode = os.lstat(platform_path).st_mode
            if stat_mod.S_ISLNK(mode):
                raise TraverseSymlinkError()
            if not stat_mod.S_ISDIR(mode):
                raise ExtractError("cannot traverse non-directory objects")
        return platform_path

    def _extract_dir(self, path: str) -> None:
        try:
            info = os.stat(path)
        except FileNotFoundError:
            os.makedirs(path, 0o755, exist_ok=True)
        else:
            if not stat_mod.S_ISDIR(info.st_mode):
                raise NotADirectoryError(
                    20, "mkdir: not a directory", path
                )
        if not stat_mod.S_ISDIR(os.lstat(path).st_mode):
            raise ExtractedDirToSymlinkError()

    def _extract_symlink(self, path: str, header: tarfile.TarInfo) -> None:
        _remove(path)
        os.symlink(header.linkname, path)

    def _extract_file(
        self, path: str, tar: tarfile.TarFile, header: tarfile.TarInfo
    ) -> None:
        _remove(path)
        source = tar.extractfile(header)
        if source is None:
            raise ExtractError(f"cannot read contents of {header.name!r}")
        fd, tmp_name = tempfile.mkstemp(dir=os.path.dirname(path) or ".")
        try:
            with os.fdopen(fd, "wb") as tmp:
                copy_with_progress(tmp, source, self.progress)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.remove(tmp_name)
            except FileNotFoundError:
                pass
            raise