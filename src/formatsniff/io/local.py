"""Local file readers using mmap."""

import asyncio
import io
import mmap
from pathlib import Path
from typing import BinaryIO, Union

LocalSource = Union[Path, str, BinaryIO]


class LocalByteReader:
    """Synchronous reader over a local path or binary file object.

    Regular files are memory-mapped on first access; in-memory objects and
    files without a usable descriptor are read into memory instead.
    """

    def __init__(self, source: LocalSource):
        self.bytes_fetched = 0
        self.requests_made = 0
        self._mmap = None
        self._data = None  # in-memory sources and empty files
        self._should_close_file = False

        if hasattr(source, 'read'):
            self._file = source
            if isinstance(source, io.BytesIO):
                self._data = source.getvalue()
        else:
            self._file = open(source, 'rb')
            self._should_close_file = True

    def _ensure_loaded(self):
        if self._mmap is not None or self._data is not None:
            return
        if self._file is None:
            raise IOError("Reader is closed")
        if not self._file.seekable():
            raise IOError("Source is not seekable")
        self._file.seek(0, io.SEEK_END)
        if self._file.tell() == 0:
            # mmap refuses empty files
            self._data = b""
            return
        try:
            self._mmap = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
        except (io.UnsupportedOperation, OSError, ValueError):
            self._file.seek(0)
            self._data = self._file.read()

    @property
    def _buffer(self):
        self._ensure_loaded()
        return self._mmap if self._mmap is not None else self._data

    @property
    def size(self) -> int:
        """Total size of the source in bytes."""
        return len(self._buffer)

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        self.requests_made += 1
        if start < 0:
            raise IOError("Start offset cannot be negative")

        buf = self._buffer
        if start + length > len(buf):
            raise IOError(f"Not enough data: requested {length} bytes at offset {start}, "
                          f"but source only has {len(buf)} bytes")

        data = bytes(buf[start:start + length])
        self.bytes_fetched += len(data)
        return data

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the mmap, and the file if we opened it."""
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
        if self._should_close_file and self._file is not None:
            self._file.close()
        self._file = None


class LocalAsyncByteReader:
    """Asynchronous local reader - thin wrapper running the sync reader in a thread."""

    def __init__(self, source: LocalSource):
        self._sync_reader = LocalByteReader(source)

    @property
    def sync_reader(self) -> LocalByteReader:
        return self._sync_reader

    @property
    def size(self) -> int:
        return self._sync_reader.size

    @property
    def bytes_fetched(self) -> int:
        return self._sync_reader.bytes_fetched

    @property
    def requests_made(self) -> int:
        return self._sync_reader.requests_made

    async def fetch(self, start: int, length: int) -> bytes:
        return await asyncio.to_thread(self._sync_reader.fetch, start, length)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        await asyncio.to_thread(self._sync_reader.close)


def open_local_reader(source: LocalSource) -> LocalByteReader:
    """Create a synchronous local byte reader."""
    return LocalByteReader(source)


async def open_local_reader_async(source: LocalSource) -> LocalAsyncByteReader:
    """Create an asynchronous local byte reader."""
    return LocalAsyncByteReader(source)
