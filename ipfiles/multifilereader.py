"""Encoding node trees as multipart streams."""

from __future__ import annotations

import secrets
import threading
from collections.abc import Iterator

from ipfiles.linkfile import Symlink
from ipfiles.multipartfile import (
    APPLICATION_DIRECTORY,
    APPLICATION_FILE,
    APPLICATION_SYMLINK,
    _join,
)
from ipfiles.node import Directory, File, FileInfo, NotSupportedError

_CHUNK = 32 * 1024


def _query_escape(text: str) -> str:
    from urllib.parse import quote_plus

    return quote_plus(text, safe="")


class MultiFileReader:
    """Reads a directory tree as multipart-encoded data."""

    def __init__(self, directory: Directory, form: bool = False) -> None:
        self._root = directory
        self._form = form
        self._boundary = secrets.token_hex(30)
        self._buffer = bytearray()
        self._chunks: Iterator[bytes] | None = None
        self._lock = threading.Lock()

    def boundary(self) -> str:
        """Return the boundary separating the parts."""
        return self._boundary

    def _part_header(self, first: bool, headers: dict[str, str]) -> bytes:
        lead = "" if first else "\r\n"
        lines = [f"{lead}--{self._boundary}\r\n"]
        lines.extend(f"{key}: {headers[key]}\r\n" for key in sorted(headers))
        lines.append("\r\n")
        return "".join(lines).encode("utf-8")

    def _generate(self) -> Iterator[bytes]:
        stack = [(iter(self._root.entries()), "")]
        first = True
        while stack:
            iterator, prefix = stack[-1]
            entry = next(iterator, None)
            if entry is None:
                stack.pop()
                continue
            node = entry.node
            full_path = _join(prefix, entry.name)
            disposition = 'form-data; name="file"' if self._form else "attachment"
            headers = {
                "Content-Disposition": (
                    f'{disposition}; filename="{_query_escape(full_path)}"'
                )
            }
            if isinstance(node, Symlink):
                headers["Content-Type"] = APPLICATION_SYMLINK
            elif isinstance(node, Directory):
                stack.append((iter(node.entries()), full_path))
                headers["Content-Type"] = APPLICATION_DIRECTORY
            elif isinstance(node, File):
                headers["Content-Type"] = APPLICATION_FILE
            else:
                raise NotSupportedError()
            if isinstance(node, FileInfo):
                headers["Abspath"] = node.abs_path()

            yield self._part_header(first, headers)
            first = False
            if isinstance(node, File):
                while chunk := node.read(_CHUNK):
                    yield chunk
            node.close()

        closing = f"--{self._boundary}--\r\n"
        yield (closing if first else "\r\n" + closing).encode("utf-8")

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes of encoded data; b'' marks the end."""
        with self._lock:
            if self._chunks is None:
                self._chunks = self._generate()
            while size is None or size < 0 or len(self._buffer) < size:
                chunk = next(self._chunks, None)
                if chunk is None:
                    break
                self._buffer.extend(chunk)
            if size is None or size < 0:
                size = len(self._buffer)
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
            return data