"""Symbolic link nodes whose content is the link target."""

from __future__ import annotations

import io
import os

from ipfiles.node import File, Node


class Symlink(File):
    """A symbolic link; reading it yields the target path."""

    def __init__(self, target: str, stat: os.stat_result | None = None) -> None:
        self.target = target
        self._stat = stat
        self._reader = io.BytesIO(target.encode("utf-8"))

    def close(self) -> None:
        """Closing a symlink has no effect."""

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._reader.seek(offset, whence)

    def size(self) -> int:
        return len(self._reader.getbuffer())

    def __repr__(self) -> str:
        return f"Symlink(target={self.target!r})"


def new_link_file(target: str, stat: os.stat_result | None = None) -> Symlink:
    """Create a symlink node pointing at ``target``."""
    return Symlink(target, stat)


def to_symlink(node: Node | None) -> Symlink | None:
    """Return ``node`` if it is a symlink, otherwise None."""
    return node if isinstance(node, Symlink) else None