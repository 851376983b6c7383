"""I/O layer for formatsniff - delivers exact byte windows and streams to predicates."""

from .base import ByteReader, AsyncByteReader, RangeNotSupportedError
from .local import open_local_reader, open_local_reader_async
from .http_sync import open_http_reader
from .http_async import open_http_reader_async
from .stream import ReaderStream


def is_url(source) -> bool:
    return isinstance(source, str) and source.startswith(('http://', 'https://'))


def open_reader(source):
    """Create the ByteReader matching ``source`` (file object, URL or path)."""
    if hasattr(source, 'read'):
        return open_local_reader(source)
    if is_url(source):
        return open_http_reader(source)
    return open_local_reader(source)


async def open_reader_async(source):
    """Create the AsyncByteReader matching ``source`` (file object, URL or path)."""
    if hasattr(source, 'read'):
        return await open_local_reader_async(source)
    if is_url(source):
        return await open_http_reader_async(source)
    return await open_local_reader_async(source)


__all__ = [
    "ByteReader", "AsyncByteReader", "RangeNotSupportedError", "ReaderStream",
    "open_reader", "open_reader_async", "is_url",
]
