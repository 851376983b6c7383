"""Factories for recognition predicates.

Header checks take a byte prefix and must be fast and bounds-safe: a buffer
shorter than the signature is simply "no match". Stream searches take a
readable, seekable binary stream and may read as far as they need.
"""

from __future__ import annotations
from typing import BinaryIO, Iterator, Sequence, Tuple

from .model import HeaderCheck, StreamSearch

Signature = Tuple[int, bytes]          # (offset, byte-pattern)

ID3V2_MAGIC = b"ID3"
ID3V2_HEADER_SIZE = 10
DEFAULT_CHUNK_SIZE = 64 * 1024


def matches_at(data: bytes, offset: int, pattern: bytes) -> bool:
    end = offset + len(pattern)
    return len(data) >= end and data[offset:end] == pattern


def prefix_signature(*signatures: Signature) -> HeaderCheck:
    """Header check matching any of the given ``(offset, pattern)`` pairs."""
    sigs: Sequence[Signature] = tuple(signatures)

    def check(data: bytes) -> bool:
        return any(matches_at(data, offset, pat) for offset, pat in sigs)

    return check


def riff_form(container: bytes | Sequence[bytes], form: bytes) -> HeaderCheck:
    """Header check for IFF-style files: container id at 0, form type at 8."""
    containers = (container,) if isinstance(container, bytes) else tuple(container)

    def check(data: bytes) -> bool:
        return matches_at(data, 8, form) and any(matches_at(data, 0, c) for c in containers)

    return check


def id3v2_size(data: bytes) -> int:
    """Return the full size of the ID3v2 tag at the start of ``data`` (0 if none)."""
    if len(data) < ID3V2_HEADER_SIZE or data[:3] != ID3V2_MAGIC:
        return 0
    size_bytes = data[6:10]
    if any(b & 0x80 for b in size_bytes):
        return 0  # not syncsafe, not a real tag
    size = 0
    for b in size_bytes:
        size = (size << 7) | b
    footer = ID3V2_HEADER_SIZE if data[5] & 0x10 else 0
    return ID3V2_HEADER_SIZE + size + footer


def iter_chunks(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


def scan_for(pattern: bytes, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> StreamSearch:
    """Stream search for ``pattern`` anywhere in the stream."""
    if not pattern:
        raise ValueError("Search pattern cannot be empty")
    overlap = len(pattern) - 1

    def search(stream: BinaryIO) -> bool:
        stream.seek(0)
        tail = b""
        for chunk in iter_chunks(stream, chunk_size):
            window = tail + chunk
            if pattern in window:
                return True
            tail = window[-overlap:] if overlap else b""
        return False

    return search


def after_id3v2(check: HeaderCheck, *, probe_size: int = 64) -> StreamSearch:
    """Stream search applying ``check`` to the data following leading ID3v2 tags.

    Several tags may be stacked in front of the payload; all are skipped.
    Returns False when the stream does not start with an ID3v2 tag, since the
    header check alone covers that case.
    """

    def search(stream: BinaryIO) -> bool:
        offset = skip_id3v2(stream)
        if not offset:
            return False
        stream.seek(offset)
        return check(stream.read(probe_size))

    return search


def skip_id3v2(stream: BinaryIO) -> int:
    """Return the offset of the first byte after any leading ID3v2 tags."""
    offset = 0
    while True:
        stream.seek(offset)
        tag_size = id3v2_size(stream.read(ID3V2_HEADER_SIZE))
        if not tag_size:
            return offset
        offset += tag_size


def any_of(*checks: HeaderCheck) -> HeaderCheck:
    """Header check accepting data that any of ``checks`` accepts."""

    def check(data: bytes) -> bool:
        return any(c(data) for c in checks)

    return check
