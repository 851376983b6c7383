from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Iterable
from urllib.parse import urlparse

from .model import Detection, FormatDescriptor


def source_extension(source) -> str:
    """Return the lower-case extension (no dot) of a path, URL or file object."""
    if hasattr(source, "read"):
        source = getattr(source, "name", "")
        if not isinstance(source, (str, Path)):
            return ""
    source_str = str(source)
    parsed = urlparse(source_str)
    if parsed.scheme in ("http", "https"):
        source_str = parsed.path
    return Path(source_str).suffix.lower().lstrip(".")


def source_label(source) -> str:
    if hasattr(source, "read"):
        return str(getattr(source, "name", "<stream>"))
    return str(source)


def descriptor_asdict(fmt: FormatDescriptor) -> Dict[str, Any]:
    return {
        "id": fmt.id,
        "name": fmt.name,
        "short_name": fmt.short_name,
        "readable": fmt.readable,
        "extensions": list(fmt.extensions()),
        "mime_types": sorted(fmt.mime_types()),
        "header_check": fmt.has_header_check,
        "stream_search": fmt.has_stream_search,
    }


def detection_asdict(det: Detection, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict, optionally filtered to ``fields``."""
    payload = {
        "id": det.format.id,
        "name": det.format.name,
        "short_name": det.format.short_name,
        "method": det.method,
    }
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"success": True, "source": det.source, "bytes_fetched": det.bytes_fetched})
    return payload


def failure_asdict(source: str, error: str) -> Dict[str, Any]:
    return {"success": False, "source": source, "error": error}
