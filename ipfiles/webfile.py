"""Regular file nodes fetched from an HTTP URL."""

from __future__ import annotations

import os
import urllib.error
import urllib.request
from http.client import HTTPResponse

from ipfiles.node import File, FileInfo, FilesError, NotSupportedError


class WebFile(File, FileInfo):
    """A file whose content is fetched with a GET request on first use."""

    def __init__(self, url: str, *, timeout: float | None = None) -> None:
        self.url = url
        self._timeout = timeout
        self._body: HTTPResponse | None = None
        self._content_length = -1

    def _start(self) -> HTTPResponse:
        if self._body is None:
            try:
                if self._timeout is None:
                    response = urllib.request.urlopen(self.url)
                else:
                    response = urllib.request.urlopen(self.url, timeout=self._timeout)
            except urllib.error.HTTPError as exc:
                exc.close()
                raise FilesError(
                    f"got non-2XX status code {exc.code}: {self.url}"
                ) from exc
            if not 200 <= response.status <= 299:
                status = response.status
                response.close()
                raise FilesError(f"got non-2XX status code {status}: {self.url}")
            header = response.headers.get("Content-Length")
            try:
                self._content_length = int(header) if header is not None else -1
            except ValueError:
                self._content_length = -1
            self._body = response
        return self._body

    def read(self, size: int = -1) -> bytes:
        """Read from the response body, performing the request if needed."""
        body = self._start()
        if size is None or size < 0:
            return body.read()
        return body.read(size)

    def close(self) -> None:
        if self._body is not None:
            self._body.close()

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        raise NotSupportedError()

    def size(self) -> int:
        """Return the Content-Length of the response."""
        self._start()
        if self._content_length < 0:
            raise FilesError("Content-Length header was not set")
        return self._content_length

    def abs_path(self) -> str:
        return self.url

    def stat(self) -> os.stat_result | None:
        return None