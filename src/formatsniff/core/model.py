from __future__ import annotations
from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, FrozenSet, Iterator, Optional

HeaderCheck = Callable[[bytes], bool]          # fast, prefix-only
StreamSearch = Callable[[BinaryIO], bool]      # slow, may scan the whole stream


class FormatsniffError(RuntimeError):
    """Base class for formatsniff errors."""
    pass


class UnknownFormatError(FormatsniffError):
    """Raised when no registered format matches a given source."""
    pass


class DetectionError(FormatsniffError):
    """Raised when a recognition predicate fails while classifying a source."""
    pass


class PredicateUnavailableError(FormatsniffError):
    """Raised when invoking a recognition predicate that was never set."""
    pass


class DuplicateFormatError(FormatsniffError):
    """Raised when registering a format id that is already taken."""
    pass


class FormatDescriptor:
    """Describes a file format.

    Carries the identity of the format, the file extensions and MIME types it
    answers to, and two optional recognition predicates:

    * ``header_check(data)`` - fast signature check over a short byte prefix.
    * ``stream_search(stream)`` - signature search that may scan a whole
      stream. May be slow; callers apply their own byte or time budget.

    Two descriptors are the same format iff their ids are equal.
    """

    def __init__(
        self,
        id: int,
        name: str,
        short_name: str = "",
        *,
        header_check: Optional[HeaderCheck] = None,
        stream_search: Optional[StreamSearch] = None,
    ) -> None:
        self.id = id
        self.name = name
        self.short_name = short_name or name
        self.readable = True
        self.header_check = header_check
        self.stream_search = stream_search
        # dict keys: case-folded value -> None (ordered set)
        self._extensions: Dict[str, None] = {}
        self._mime_types: Dict[str, None] = {}

    # --- copy ---
    @classmethod
    def copy_of(cls, other: FormatDescriptor) -> FormatDescriptor:
        """Return a new descriptor sharing ``other``'s fields and predicates.

        Extension and MIME sets are copied, so the two descriptors can be
        extended independently afterwards. Subclasses with extra constructor
        arguments or state override this.
        """
        new = cls(
            other.id, other.name, other.short_name,
            header_check=other.header_check,
            stream_search=other.stream_search,
        )
        new.readable = other.readable
        new._extensions = dict(other._extensions)
        new._mime_types = dict(other._mime_types)
        return new

    def copy(self) -> FormatDescriptor:
        return type(self).copy_of(self)

    # --- extensions ---
    def add_extension(self, ext: str) -> None:
        """Add ``ext`` (e.g. "bmp") to the supported extensions.

        Values are case-folded, so lookups ignore case also for non-ASCII
        text. The dotless "ı" is the exception: it upper-cases to "I",
        which folds to a plain "i".
        """
        self._extensions.setdefault(ext.casefold(), None)

    def is_valid_extension(self, ext: str) -> bool:
        return ext.casefold() in self._extensions

    def extensions(self) -> Iterator[str]:
        """Yield the supported extensions (case-folded). Each call starts over."""
        yield from self._extensions

    def __iter__(self) -> Iterator[str]:
        return self.extensions()

    # --- MIME types ---
    def add_mime_type(self, mime_type: str) -> None:
        self._mime_types.setdefault(mime_type.casefold(), None)

    def is_valid_mime_type(self, mime_type: str) -> bool:
        return mime_type.casefold() in self._mime_types

    def mime_types(self) -> FrozenSet[str]:
        return frozenset(self._mime_types)

    # --- recognition ---
    @property
    def has_header_check(self) -> bool:
        return self.header_check is not None

    @property
    def has_stream_search(self) -> bool:
        return self.stream_search is not None

    def match_header(self, data: bytes) -> bool:
        """Run the header check on ``data``; errors from the check propagate."""
        if self.header_check is None:
            raise PredicateUnavailableError(f"{self.short_name} has no header check")
        return bool(self.header_check(data))

    def search_stream(self, stream: BinaryIO) -> bool:
        """Run the stream search on ``stream``. NB: may read the whole stream."""
        if self.stream_search is None:
            raise PredicateUnavailableError(f"{self.short_name} has no stream search")
        return bool(self.stream_search(stream))

    # --- identity ---
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormatDescriptor):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        exts = ",".join(self._extensions)
        return f"FormatDescriptor(id={self.id}, short_name={self.short_name!r}, extensions=[{exts}])"


@dataclass(slots=True)
class Detection:
    format: FormatDescriptor
    method: str                # "header" | "search" | "extension"
    bytes_fetched: int         # filled by the I/O layer
    source: str


@dataclass(slots=True)
class ResolverConfig:
    header_size: int = 4096
    search: bool = True
    search_limit: Optional[int] = None      # bytes handed to stream searches
    search_timeout: Optional[float] = None  # seconds, async resolution only
    extension_fallback: bool = True
    readable_only: bool = True
