"""File-like view over a ByteReader, handed to stream-search predicates."""

import io
import time
from typing import Optional

from .base import ByteReader


class ReaderStream(io.RawIOBase):
    """Readable, seekable binary stream backed by ``reader``.

    ``limit`` caps how far into the source the stream will go: reads past it
    behave as end-of-file. ``deadline`` is a ``time.monotonic()`` value after
    which reads raise TimeoutError. These are how callers bound a slow
    signature search. The reader itself stays owned by the caller and is
    not closed with the stream.
    """

    def __init__(self, reader: ByteReader, limit: Optional[int] = None, deadline: Optional[float] = None):
        size = reader.size
        if size is None:
            raise IOError("Source size is unknown")
        self._reader = reader
        self._end = size if limit is None else min(size, limit)
        self._pos = 0
        self._deadline = deadline

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            pos = offset
        elif whence == io.SEEK_CUR:
            pos = self._pos + offset
        elif whence == io.SEEK_END:
            pos = self._end + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")
        if pos < 0:
            raise ValueError("Negative seek position")
        self._pos = pos
        return pos

    def readinto(self, buffer) -> int:
        length = min(len(buffer), self._end - self._pos)
        if length <= 0:
            return 0
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise TimeoutError("Stream search timed out")
        data = self._reader.fetch(self._pos, length)
        buffer[:length] = data
        self._pos += length
        return length
