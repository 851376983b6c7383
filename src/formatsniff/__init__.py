"""formatsniff - identify media file formats from magic numbers, stream signatures and extensions."""

from .core.model import (                                             # re-export
    Detection, DetectionError, DuplicateFormatError, FormatDescriptor, FormatsniffError,
    PredicateUnavailableError, ResolverConfig, UnknownFormatError,
)
from .core.registry import FormatRegistry, default_registry
from .core.resolver import FormatResolver

# Import formats to trigger registration
from . import formats  # noqa: F401


def _resolver(registry: FormatRegistry | None, options) -> FormatResolver:
    return FormatResolver(registry if registry is not None else default_registry(), ResolverConfig(**options))


async def identify(source, *, registry: FormatRegistry | None = None, **options) -> Detection:
    """Identify the format of a source (path, URL, or file-like object) asynchronously.

    ``options`` are ResolverConfig fields, e.g. ``search=False`` or ``search_timeout=5``.
    """
    return await _resolver(registry, options).resolve(source)


def identify_sync(source, *, registry: FormatRegistry | None = None, **options) -> Detection:
    """Identify the format of a source (path, URL, or file-like object) synchronously."""
    return _resolver(registry, options).resolve_sync(source)


__all__ = [
    "identify", "identify_sync",
    "FormatDescriptor", "FormatRegistry", "FormatResolver", "ResolverConfig", "Detection",
    "FormatsniffError", "UnknownFormatError", "DetectionError",
    "PredicateUnavailableError", "DuplicateFormatError",
    "default_registry",
]
