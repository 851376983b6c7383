from __future__ import annotations
import asyncio
import concurrent.futures
import logging
import threading
import time
import warnings
from typing import BinaryIO, Callable, List, Optional

from ..io import open_reader, open_reader_async
from ..io.stream import ReaderStream
from .model import (
    Detection,
    DetectionError,
    FormatDescriptor,
    FormatsniffError,
    ResolverConfig,
    UnknownFormatError,
)
from .registry import FormatRegistry, default_registry
from .util import source_extension, source_label

logger = logging.getLogger(__name__)


def _prefix_ladder(header_size: int) -> List[int]:
    """Request sizes to try when the source size is unknown: header_size, halving down to 1."""
    sizes = []
    size = header_size
    while size >= 1:
        sizes.append(size)
        size //= 2
    return sizes


def _is_short_read(err: OSError) -> bool:
    msg = str(err).lower()
    return "not enough data" in msg or "requested" in msg


def _in_daemon_thread(fn, *args) -> asyncio.Future:
    """Run ``fn`` in a daemon thread and return an awaitable for its result.

    Unlike ``asyncio.to_thread``, an abandoned call neither holds up
    ``asyncio.run`` at shutdown nor keeps the interpreter alive.
    """
    future: concurrent.futures.Future = concurrent.futures.Future()

    def _runner():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except BaseException as exc:
            future.set_exception(exc)

    threading.Thread(target=_runner, daemon=True, name="formatsniff-search").start()
    return asyncio.wrap_future(future)


def _invoke(fmt: FormatDescriptor, step: Callable, arg) -> bool:
    """Call a descriptor predicate, turning its failures into DetectionError."""
    try:
        return step(arg)
    except FormatsniffError:
        raise
    except Exception as exc:
        raise DetectionError(f"Recognition of {fmt.short_name} failed: {exc}") from exc


class FormatResolver:
    """Classifies sources against the descriptors of a registry.

    Order of the attempts:

    1. header checks over the first ``header_size`` bytes,
    2. stream searches (formats claiming the source's extension first),
    3. the source's extension alone.

    The first format that answers wins. A predicate that raises is reported
    as a DetectionError, never as a non-match.
    """

    def __init__(self, registry: FormatRegistry | None = None, config: ResolverConfig | None = None):
        self.registry = registry if registry is not None else default_registry()
        self.config = config if config is not None else ResolverConfig()

    def candidates(self) -> List[FormatDescriptor]:
        if self.config.readable_only:
            return self.registry.readable()
        return list(self.registry)

    # --- matching over data already in hand ---
    def match_prefix(self, data: bytes) -> Optional[FormatDescriptor]:
        """Fast path: first candidate whose header check accepts ``data``."""
        for fmt in self.candidates():
            if fmt.has_header_check and _invoke(fmt, fmt.match_header, data):
                return fmt
        return None

    def match_stream(self, stream: BinaryIO, ext: str = "") -> Optional[FormatDescriptor]:
        """Slow path: first candidate whose stream search finds its signature."""
        searchable = [fmt for fmt in self.candidates() if fmt.has_stream_search]
        if ext:
            # stable: extension owners first, priority order otherwise kept
            searchable.sort(key=lambda fmt: not fmt.is_valid_extension(ext))
        for fmt in searchable:
            stream.seek(0)
            logger.debug("Searching stream for %s", fmt.short_name)
            if _invoke(fmt, fmt.search_stream, stream):
                return fmt
        return None

    def match_extension(self, ext: str) -> Optional[FormatDescriptor]:
        if not ext:
            return None
        for fmt in self.candidates():
            if fmt.is_valid_extension(ext):
                return fmt
        return None

    def by_mime_type(self, mime_type: str) -> List[FormatDescriptor]:
        owners = self.registry.by_mime_type(mime_type)
        if self.config.readable_only:
            return [fmt for fmt in owners if fmt.readable]
        return owners

    # --- sync ---
    def _read_prefix_sync(self, reader) -> bytes:
        size = reader.size
        if size is not None:
            length = min(self.config.header_size, size)
            return reader.fetch(0, length) if length > 0 else b""
        for attempt in _prefix_ladder(self.config.header_size):
            try:
                return reader.fetch(0, attempt)
            except OSError as e:
                if not _is_short_read(e):
                    raise
        return b""

    def _search_reader(self, reader, ext: str, deadline: Optional[float] = None) -> Optional[FormatDescriptor]:
        if reader.size is None:
            warnings.warn("Source size unknown, skipping stream search")
            return None
        with ReaderStream(reader, limit=self.config.search_limit, deadline=deadline) as stream:
            return self.match_stream(stream, ext)

    def _finish(self, fmt: Optional[FormatDescriptor], method: str, label: str, bytes_fetched: int) -> Detection:
        logger.debug("%s: %s by %s", label, fmt.short_name, method)
        return Detection(format=fmt, method=method, bytes_fetched=bytes_fetched, source=label)

    def resolve_sync(self, source) -> Detection:
        """Identify the format of a path, URL or binary file object."""
        label = source_label(source)
        ext = source_extension(source)
        with open_reader(source) as reader:
            prefix = self._read_prefix_sync(reader)
            fmt = self.match_prefix(prefix)
            if fmt is not None:
                return self._finish(fmt, "header", label, reader.bytes_fetched)

            if self.config.search:
                fmt = self._search_reader(reader, ext)
                if fmt is not None:
                    return self._finish(fmt, "search", label, reader.bytes_fetched)

            if self.config.extension_fallback:
                fmt = self.match_extension(ext)
                if fmt is not None:
                    return self._finish(fmt, "extension", label, reader.bytes_fetched)

        raise UnknownFormatError(f"No format matches {label}")

    # --- async ---
    async def _read_prefix(self, reader) -> bytes:
        size = reader.size
        if size is not None:
            length = min(self.config.header_size, size)
            return await reader.fetch(0, length) if length > 0 else b""
        for attempt in _prefix_ladder(self.config.header_size):
            try:
                return await reader.fetch(0, attempt)
            except OSError as e:
                if not _is_short_read(e):
                    raise
        return b""

    def _search_source(self, source, reader, ext: str,
                       deadline: Optional[float]) -> tuple[Optional[FormatDescriptor], int]:
        """Run the slow path in a worker thread, over a synchronous reader."""
        sync_reader = getattr(reader, "sync_reader", None)
        if sync_reader is not None:
            return self._search_reader(sync_reader, ext, deadline), 0
        with open_reader(source) as own_reader:
            return self._search_reader(own_reader, ext, deadline), own_reader.bytes_fetched

    async def _search(self, source, reader, ext: str) -> tuple[Optional[FormatDescriptor], int]:
        timeout = self.config.search_timeout
        if timeout is None:
            return await _in_daemon_thread(self._search_source, source, reader, ext, None)
        # the deadline also stops an abandoned search at its next read
        deadline = time.monotonic() + timeout
        work = _in_daemon_thread(self._search_source, source, reader, ext, deadline)
        try:
            return await asyncio.wait_for(work, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise DetectionError(f"Stream search timed out after {timeout}s") from exc

    async def resolve(self, source) -> Detection:
        """Identify the format of a source without blocking the event loop."""
        label = source_label(source)
        ext = source_extension(source)
        async with await open_reader_async(source) as reader:
            prefix = await self._read_prefix(reader)
            fmt = self.match_prefix(prefix)
            if fmt is not None:
                return self._finish(fmt, "header", label, reader.bytes_fetched)

            if self.config.search:
                fmt, extra = await self._search(source, reader, ext)
                if fmt is not None:
                    return self._finish(fmt, "search", label, reader.bytes_fetched + extra)

            if self.config.extension_fallback:
                fmt = self.match_extension(ext)
                if fmt is not None:
                    return self._finish(fmt, "extension", label, reader.bytes_fetched)

        raise UnknownFormatError(f"No format matches {label}")
