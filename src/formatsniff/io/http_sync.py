"""Synchronous HTTP byte reader using requests."""

from typing import Optional

import requests

from .base import RangeNotSupportedError, RANGE_FALLBACK_MAX, check_window, slice_window, wants_full_get

HEAD_TIMEOUT = 30
GET_TIMEOUT = 60

# Module-level session for connection pooling
_session: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPByteReader:
    """Synchronous HTTP byte reader with Range support.

    A HEAD request is issued on construction to learn the size and whether
    the server honours ``Range``. Small resources served without range
    support are downloaded once and sliced locally.
    """

    def __init__(self, url: str):
        self.url = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._full_content: Optional[bytes] = None
        self._session = _get_session()
        self._probe()

    def _probe(self):
        self.requests_made += 1
        try:
            response = self._session.head(self.url, timeout=HEAD_TIMEOUT, allow_redirects=True)
        except requests.RequestException as e:
            raise IOError(f"HEAD request failed: {e}") from e
        if response.status_code >= 400:
            raise IOError(f"HEAD request failed with status {response.status_code}")

        content_length = response.headers.get('content-length')
        if content_length:
            self.content_length = int(content_length)
        self._accept_ranges = response.headers.get('accept-ranges', '').lower() == 'bytes'

    @property
    def size(self) -> Optional[int]:
        if self._full_content is not None:
            return len(self._full_content)
        return self.content_length

    def _store_full(self, content: bytes):
        self._full_content = content
        self.bytes_fetched = len(content)

    def _fetch_full_content(self):
        self.requests_made += 1
        try:
            response = self._session.get(self.url, timeout=GET_TIMEOUT)
        except requests.RequestException as e:
            raise IOError(f"GET request failed: {e}") from e
        if response.status_code >= 400:
            raise IOError(f"GET request failed with status {response.status_code}")
        self._store_full(response.content)

    def _fetch_range(self, start: int, length: int, retry_count: int = 0) -> bytes:
        end = start + length - 1
        self.requests_made += 1
        try:
            response = self._session.get(self.url, headers={'Range': f'bytes={start}-{end}'},
                                         timeout=HEAD_TIMEOUT)
        except requests.RequestException as e:
            if retry_count == 0:
                return self._fetch_range(start, length, retry_count + 1)
            raise IOError(f"Range request failed: {e}") from e

        if response.status_code == 200:
            # Range ignored, whole body returned
            if self.content_length and self.content_length >= RANGE_FALLBACK_MAX:
                raise RangeNotSupportedError("Server doesn't support ranges and file is too large")
            self._store_full(response.content)
            return slice_window(self._full_content, start, length)

        if response.status_code == 206:
            data = response.content
            self.bytes_fetched += len(data)
            if len(data) < length:
                # Short 206: ask once more for the remainder
                if retry_count:
                    raise IOError(f"Not enough data: requested {length} bytes at offset {start}")
                data += self._fetch_range(start + len(data), length - len(data), retry_count + 1)
            return data

        raise IOError(f"Range request failed with status {response.status_code}")

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        check_window(start, length)

        if self._full_content is not None:
            return slice_window(self._full_content, start, length)

        if wants_full_get(self.content_length, self._accept_ranges):
            self._fetch_full_content()
            return slice_window(self._full_content, start, length)

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't support ranges and file is too large")

        return self._fetch_range(start, length)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        # Session is shared, nothing to release per reader
        self._full_content = None


def open_http_reader(url: str) -> HTTPByteReader:
    """Create a synchronous HTTP byte reader."""
    return HTTPByteReader(url)
