"""Asynchronous HTTP byte reader using httpx."""

import asyncio
from typing import Optional

import httpx

from .base import RangeNotSupportedError, RANGE_FALLBACK_MAX, check_window, slice_window, wants_full_get

# Global async client, bound to the loop that created it
_client: Optional[httpx.AsyncClient] = None
_client_loop: Optional[asyncio.AbstractEventLoop] = None


def _get_client() -> httpx.AsyncClient:
    global _client, _client_loop
    loop = asyncio.get_running_loop()
    if _client is None or _client_loop is not loop:
        _client = httpx.AsyncClient(timeout=60.0, follow_redirects=True)
        _client_loop = loop
    return _client


class HTTPAsyncByteReader:
    """Asynchronous HTTP byte reader with Range support."""

    def __init__(self, url: str):
        self.url = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._full_content: Optional[bytes] = None
        self._initialized = False

    async def _ensure_initialized(self):
        """HEAD the resource once to learn its size and range support."""
        if self._initialized:
            return
        self.requests_made += 1
        try:
            response = await _get_client().head(self.url)
        except httpx.RequestError as e:
            raise IOError(f"HEAD request failed: {e}") from e
        if response.status_code >= 400:
            raise IOError(f"HEAD request failed with status {response.status_code}")

        content_length = response.headers.get('content-length')
        if content_length:
            self.content_length = int(content_length)
        self._accept_ranges = response.headers.get('accept-ranges', '').lower() == 'bytes'
        self._initialized = True

    @property
    def size(self) -> Optional[int]:
        if self._full_content is not None:
            return len(self._full_content)
        return self.content_length

    def _store_full(self, content: bytes):
        self._full_content = content
        self.bytes_fetched = len(content)

    async def _fetch_full_content(self):
        self.requests_made += 1
        try:
            response = await _get_client().get(self.url)
        except httpx.RequestError as e:
            raise IOError(f"GET request failed: {e}") from e
        if response.status_code >= 400:
            raise IOError(f"GET request failed with status {response.status_code}")
        self._store_full(response.content)

    async def _fetch_range(self, start: int, length: int, retry_count: int = 0) -> bytes:
        end = start + length - 1
        self.requests_made += 1
        try:
            response = await _get_client().get(self.url, headers={'Range': f'bytes={start}-{end}'})
        except httpx.RequestError as e:
            if retry_count == 0:
                return await self._fetch_range(start, length, retry_count + 1)
            raise IOError(f"Range request failed: {e}") from e

        if response.status_code == 200:
            if self.content_length and self.content_length >= RANGE_FALLBACK_MAX:
                raise RangeNotSupportedError("Server doesn't support ranges and file is too large")
            self._store_full(response.content)
            return slice_window(self._full_content, start, length)

        if response.status_code == 206:
            data = response.content
            self.bytes_fetched += len(data)
            if len(data) < length:
                if retry_count:
                    raise IOError(f"Not enough data: requested {length} bytes at offset {start}")
                data += await self._fetch_range(start + len(data), length - len(data), retry_count + 1)
            return data

        raise IOError(f"Range request failed with status {response.status_code}")

    async def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        await self._ensure_initialized()
        check_window(start, length)

        if self._full_content is not None:
            return slice_window(self._full_content, start, length)

        if wants_full_get(self.content_length, self._accept_ranges):
            await self._fetch_full_content()
            return slice_window(self._full_content, start, length)

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't support ranges and file is too large")

        return await self._fetch_range(start, length)

    async def __aenter__(self):
        await self._ensure_initialized()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        # Client is shared, don't close it here
        self._full_content = None


async def open_http_reader_async(url: str) -> HTTPAsyncByteReader:
    """Create an asynchronous HTTP byte reader."""
    reader = HTTPAsyncByteReader(url)
    await reader._ensure_initialized()
    return reader


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client, _client_loop
    if _client is not None:
        await _client.aclose()
        _client = None
        _client_loop = None
