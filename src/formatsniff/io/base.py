"""Reader protocols and shared types for the I/O layer."""

from typing import Optional, Protocol, runtime_checkable


class RangeNotSupportedError(RuntimeError):
    """Raised when server rejects Range and file size > RANGE_FALLBACK_MAX."""


RANGE_FALLBACK_MAX = 10 * 1024 * 1024  # 10 MB


@runtime_checkable
class ByteReader(Protocol):
    """Protocol for synchronous byte readers."""

    bytes_fetched: int  # running total
    requests_made: int

    @property
    def size(self) -> Optional[int]:
        """Total size of the source, or None when it cannot be known up front."""
        ...

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`.
        If not enough data can be fetched → raise IOError.
        """
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class AsyncByteReader(Protocol):
    """Protocol for asynchronous byte readers."""

    bytes_fetched: int  # running total
    requests_made: int

    @property
    def size(self) -> Optional[int]:
        ...

    async def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`.
        If not enough data can be fetched → raise IOError.
        """
        ...

    async def close(self) -> None:
        ...


def wants_full_get(content_length: Optional[int], accept_ranges: bool) -> bool:
    """True when ranges are unsupported but the resource is small enough to download whole."""
    return (not accept_ranges and
            content_length is not None and
            content_length < RANGE_FALLBACK_MAX)


def check_window(start: int, length: int) -> None:
    if start < 0:
        raise IOError("Start offset cannot be negative")
    if length <= 0:
        raise IOError("Length must be positive")


def slice_window(content: bytes, start: int, length: int) -> bytes:
    if start + length > len(content):
        raise IOError(f"Not enough data: requested {length} bytes at offset {start}, "
                      f"but source only has {len(content)} bytes")
    return content[start:start + length]
