from __future__ import annotations
import bisect
import warnings
from typing import Dict, Iterator, List, Optional

from .model import DuplicateFormatError, FormatDescriptor


class FormatRegistry:
    """Owns the known format descriptors, ordered by priority."""

    def __init__(self) -> None:
        self._by_id: Dict[int, FormatDescriptor] = {}
        self._order: List[tuple[int, int]] = []   # (priority, id), sorted

    def register(self, descriptor: FormatDescriptor, *, priority: int = 100) -> FormatDescriptor:
        """Add ``descriptor``; lower priority is examined earlier."""
        if descriptor.id in self._by_id:
            existing = self._by_id[descriptor.id]
            raise DuplicateFormatError(
                f"Format id {descriptor.id} already registered for {existing.short_name}"
            )
        if not any(True for _ in descriptor.extensions()):
            warnings.warn(f"Format {descriptor.short_name} registered without any extension")
        if not (descriptor.has_header_check or descriptor.has_stream_search):
            warnings.warn(f"Format {descriptor.short_name} has no recognition predicate")

        self._by_id[descriptor.id] = descriptor
        bisect.insort(self._order, (priority, descriptor.id))
        return descriptor

    def unregister(self, format_id: int) -> None:
        self._by_id.pop(format_id)
        self._order = [entry for entry in self._order if entry[1] != format_id]

    def get(self, format_id: int) -> Optional[FormatDescriptor]:
        return self._by_id.get(format_id)

    def __contains__(self, format_id: object) -> bool:
        return format_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[FormatDescriptor]:
        for _, format_id in self._order:
            yield self._by_id[format_id]

    # --- lookups ---
    # computed on demand so extensions added after register() are honoured
    def by_extension(self, ext: str) -> List[FormatDescriptor]:
        ext = ext.lstrip(".")
        if not ext:
            return []
        return [d for d in self if d.is_valid_extension(ext)]

    def by_mime_type(self, mime_type: str) -> List[FormatDescriptor]:
        # drop parameters such as "; codecs=opus"
        mime_type = mime_type.split(";", 1)[0].strip()
        return [d for d in self if d.is_valid_mime_type(mime_type)]

    def readable(self) -> List[FormatDescriptor]:
        return [d for d in self if d.readable]


# singleton used project-wide
_REGISTRY = FormatRegistry()


def default_registry() -> FormatRegistry:
    """Return the process-wide registry, filled with the built-in formats."""
    from .. import formats  # noqa: F401  (registers on import)
    return _REGISTRY
