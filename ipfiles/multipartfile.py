"""Directories decoded from multipart/form-data streams."""

from __future__ import annotations

import email.message
import email.utils
import io
import os
import posixpath
import re
from collections.abc import Iterator
from typing import BinaryIO
from urllib.parse import unquote_plus

from ipfiles.linkfile import new_link_file
from ipfiles.node import (
    DirEntry,
    Directory,
    FilesError,
    Node,
    NotDirectoryError,
    NotSupportedError,
)
from ipfiles.readerfile import ReaderFile
from ipfiles.slicedirectory import FileEntry

MULTIPART_FORMDATA_TYPE = "multipart/form-data"
MULTIPART_MIXED_TYPE = "multipart/mixed"
APPLICATION_DIRECTORY = "application/x-directory"
APPLICATION_SYMLINK = "application/symlink"
APPLICATION_FILE = "application/octet-stream"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class MultipartPart:
    """One part of a multipart stream: its headers and its body."""

    def __init__(self, headers: dict[str, str], body: bytes) -> None:
        self.headers = headers
        self._body = io.BytesIO(body)

    def header(self, name: str) -> str:
        """Return the value of header ``name``, or '' when absent."""
        return self.headers.get(name.lower(), "")

    def read(self, size: int = -1) -> bytes:
        return self._body.read(size)

    def close(self) -> None:
        self._body.seek(0, os.SEEK_END)


class MultipartReader:
    """Splits a binary stream into parts separated by ``boundary``."""

    def __init__(self, stream: BinaryIO, boundary: str) -> None:
        self._stream = stream
        self._boundary = boundary.encode("utf-8")
        self._data: bytes | None = None
        self._pos = 0
        self._nl = b"\r\n"
        self._started = False
        self._done = False

    def _load(self) -> bytes:
        if self._data is None:
            chunks = []
            while True:
                chunk = self._stream.read(65536)
                if not chunk:
                    break
                chunks.append(chunk)
            self._data = b"".join(chunks)
        return self._data

    def _find_first_boundary(self, data: bytes) -> int:
        dash = b"--" + self._boundary
        start = 0
        while True:
            idx = data.find(dash, start)
            if idx < 0:
                raise FilesError("multipart: NextPart: EOF")
            if idx == 0 or data[idx - 1:idx] == b"\n":
                return idx + len(dash)
            start = idx + 1

    def _skip_line(self, data: bytes, pos: int) -> int:
        end = data.find(b"\n", pos)
        return len(data) if end < 0 else end + 1

    def next_part(self) -> MultipartPart | None:
        """Return the next part, or None once the closing boundary is reached."""
        if self._done:
            return None
        data = self._load()
        if not self._started:
            self._started = True
            pos = self._find_first_boundary(data)
            if data.startswith(b"--", pos):
                self._done = True
                return None
            self._nl = b"\r\n" if data.startswith(b"\r\n", pos) else b"\n"
            self._pos = self._skip_line(data, pos)

        nl = self._nl
        pos = self._pos
        headers: dict[str, str] = {}
        while True:
            end = data.find(nl, pos)
            if end < 0:
                raise FilesError("multipart: unexpected EOF in part headers")
            line = data[pos:end].decode("utf-8", errors="replace")
            pos = end + len(nl)
            if not line:
                break
            key, sep, value = line.partition(":")
            if not sep:
                raise FilesError(f"malformed MIME header line: {line}")
            headers.setdefault(key.strip().lower(), value.strip())

        delimiter = nl + b"--" + self._boundary
        idx = data.find(delimiter, max(pos - len(nl), 0))
        if idx < 0:
            raise FilesError("multipart: unexpected EOF in part body")
        body = data[pos:max(idx, pos)]
        after = idx + len(delimiter)
        if data.startswith(b"--", after):
            self._done = True
        self._pos = self._skip_line(data, after)
        return MultipartPart(headers, body)


class MultipartWalker:
    """Shared cursor over the parts of a multipart reader."""

    def __init__(self, reader: MultipartReader | None) -> None:
        self.reader = reader
        self.part: MultipartPart | None = None

    def consume_part(self) -> None:
        """Mark the current part as used."""
        self.part = None

    def get_part(self) -> MultipartPart | None:
        """Return the current part, fetching the next one when needed."""
        if self.part is not None:
            return self.part
        if self.reader is None:
            return None
        self.part = self.reader.next_part()
        if self.part is None:
            self.reader = None
        return self.part

    def next_file(self) -> Node | None:
        """Consume the current part and return it as a node, or None at the end."""
        part = self.get_part()
        if part is None:
            return None
        self.consume_part()

        content_type = part.header("Content-Type")
        if content_type:
            content_type = _parse_media_type(content_type)

        if content_type in (MULTIPART_FORMDATA_TYPE, APPLICATION_DIRECTORY):
            return MultipartDirectory(_file_name(part), self, part)
        if content_type == APPLICATION_SYMLINK:
            return new_link_file(part.read().decode("utf-8", errors="replace"))
        return ReaderFile(part, abspath=part.header("abspath"))


def _parse_media_type(value: str) -> str:
    media = value.split(";", 1)[0].strip().lower()
    kind, sep, sub = media.partition("/")
    if not sep or not kind or not sub or " " in media:
        raise FilesError(f"mime: invalid media type: {value!r}")
    return media


def _clean(path: str) -> str:
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(base: str, name: str) -> str:
    parts = [p for p in (base, name) if p]
    return _clean("/".join(parts)) if parts else ""


def _file_name(part: MultipartPart) -> str:
    value = part.header("Content-Disposition")
    if not value:
        return ""
    message = email.message.Message()
    message["content-disposition"] = value
    param = message.get_param("filename", header="content-disposition")
    if param is None:
        filename = ""
    else:
        filename = email.utils.collapse_rfc2231_value(param)
    if not _BAD_ESCAPE.search(filename):
        filename = unquote_plus(filename)
    return _clean("/" + filename)


def _dir_name(filename: str) -> str:
    return filename if filename.endswith("/") else filename + "/"


def _is_child(child: str, parent: str) -> bool:
    return child.startswith(_dir_name(parent))


def _make_relative(child: str, parent: str) -> str:
    prefix = _dir_name(parent)
    return child[len(prefix):] if child.startswith(prefix) else child


class MultipartDirectory(Directory):
    """A directory whose entries are read from a multipart stream."""

    def __init__(
        self, path: str, walker: MultipartWalker, part: MultipartPart | None = None
    ) -> None:
        self.path = path
        self.walker = walker
        self.part = part

    def entries(self) -> Iterator[DirEntry]:
        """Iterate over the entries; the stream is consumed as it goes."""
        walker = self.walker
        cur_name = ""
        while walker.reader is not None:
            part = walker.get_part()
            if part is None:
                return
            name = _file_name(part)
            if not _is_child(name, self.path):
                return
            if cur_name and _is_child(name, _join(self.path, cur_name)):
                walker.consume_part()
                continue
            name = _make_relative(name, self.path)
            idx = name.find("/")
            if idx >= 0:
                cur_name = name[:idx]
                yield FileEntry(
                    cur_name, MultipartDirectory(_join(self.path, cur_name), walker)
                )
                continue
            cur_name = name
            node = walker.next_file()
            if node is None:
                return
            yield FileEntry(name, node)

    def close(self) -> None:
        if self.part is not None:
            self.part.close()

    def size(self) -> int:
        raise NotSupportedError()


def new_file_from_part_reader(reader: MultipartReader, mediatype: str) -> MultipartDirectory:
    """Create a directory from a multipart reader."""
    if mediatype not in (APPLICATION_DIRECTORY, MULTIPART_FORMDATA_TYPE):
        raise NotDirectoryError()
    return MultipartDirectory("/", MultipartWalker(reader))