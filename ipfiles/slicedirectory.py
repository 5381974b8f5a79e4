"""In-memory directories built from lists or mappings of nodes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from ipfiles.node import DirEntry, Directory, Node


@dataclass(frozen=True)
class FileEntry:
    """A directory entry pairing a name with a node."""

    name: str
    node: Node


class SliceDirectory(Directory):
    """A directory holding a fixed, ordered list of entries."""

    def __init__(self, entries: Iterable[DirEntry]) -> None:
        self._entries = list(entries)

    def entries(self) -> Iterator[DirEntry]:
        return iter(self._entries)

    def close(self) -> None:
        """Closing an in-memory directory has no effect."""

    def size(self) -> int:
        return sum(entry.node.size() for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def new_map_directory(files: Mapping[str, Node] | None) -> SliceDirectory:
    """Create a directory from a name-to-node mapping, sorted by name."""
    items = sorted((files or {}).items())
    return new_slice_directory(FileEntry(name, node) for name, node in items)


def new_slice_directory(entries: Iterable[DirEntry]) -> SliceDirectory:
    """Create a directory holding ``entries`` in the given order."""
    return SliceDirectory(entries)