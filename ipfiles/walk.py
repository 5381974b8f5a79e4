"""Depth-first traversal of node trees."""

from __future__ import annotations

import os
from collections.abc import Iterator

from ipfiles.node import Directory, Node


def walk(node: Node) -> Iterator[tuple[str, Node]]:
    """Yield ``(path, node)`` pairs, parents before children; the root path is ''."""
    yield from _walk("", node)


def _walk(path: str, node: Node) -> Iterator[tuple[str, Node]]:
    yield path, node
    if isinstance(node, Directory):
        for entry in node.entries():
            yield from _walk(os.path.join(path, entry.name), entry.node)