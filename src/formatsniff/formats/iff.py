"""Chunked (RIFF / IFF) formats."""

from __future__ import annotations

from ..core.model import FormatDescriptor
from ..core.registry import _REGISTRY
from ..core.signatures import any_of, prefix_signature, riff_form
from . import ids

WAV = FormatDescriptor(
    ids.WAV, "PCM (uncompressed audio)", "WAV",
    header_check=riff_form((b"RIFF", b"RF64", b"BW64"), b"WAVE"),
)
for ext in ("wav", "bwf", "bwav"):
    WAV.add_extension(ext)
for mime in ("audio/wav", "audio/x-wav", "audio/wave", "audio/vnd.wave"):
    WAV.add_mime_type(mime)

AIFF = FormatDescriptor(
    ids.AIFF, "Audio Interchange File Format", "AIFF",
    header_check=riff_form(b"FORM", b"AIFF"),
)
AIFF.add_mime_type("audio/aiff")
AIFF.add_mime_type("audio/x-aiff")

# compressed variant: same MIME types, its own form type and extension
AIFC = FormatDescriptor.copy_of(AIFF)
AIFC.id = ids.AIFC
AIFC.name = "Audio Interchange File Format (compressed)"
AIFC.short_name = "AIFC"
AIFC.header_check = riff_form(b"FORM", b"AIFC")
AIFC.add_extension("aifc")
AIFC.add_mime_type("audio/x-aifc")

AIFF.add_extension("aif")
AIFF.add_extension("aiff")

MIDI = FormatDescriptor(
    ids.MIDI, "Musical Instrument Digital Interface", "MIDI",
    header_check=any_of(prefix_signature((0, b"MThd")), riff_form(b"RIFF", b"RMID")),
)
for ext in ("mid", "midi", "rmi", "kar"):
    MIDI.add_extension(ext)
for mime in ("audio/midi", "audio/mid", "audio/x-midi"):
    MIDI.add_mime_type(mime)

_REGISTRY.register(WAV, priority=50)
_REGISTRY.register(AIFF, priority=50)
_REGISTRY.register(AIFC, priority=50)
_REGISTRY.register(MIDI, priority=60)
