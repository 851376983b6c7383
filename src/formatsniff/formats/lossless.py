"""Lossless and high-resolution codecs with their own magic numbers.

These files are commonly prefixed by an ID3v2 tag written by tools that do not
know the format, so each one also gets a stream search that looks past it.
"""

from __future__ import annotations

from ..core.model import FormatDescriptor
from ..core.registry import _REGISTRY
from ..core.signatures import after_id3v2, prefix_signature
from . import ids


def _magic(fmt_id: int, name: str, short_name: str, *signatures) -> FormatDescriptor:
    check = prefix_signature(*signatures)
    return FormatDescriptor(fmt_id, name, short_name, header_check=check, stream_search=after_id3v2(check))


FLAC = _magic(ids.FLAC, "Free Lossless Audio Codec", "FLAC", (0, b"fLaC"))
FLAC.add_extension("flac")
FLAC.add_extension("fla")
for mime in ("audio/flac", "audio/x-flac"):
    FLAC.add_mime_type(mime)

APE = _magic(ids.APE, "Monkey's Audio", "APE", (0, b"MAC "))
APE.add_extension("ape")
for mime in ("audio/ape", "audio/x-ape", "audio/x-monkeys-audio"):
    APE.add_mime_type(mime)

WAVPACK = _magic(ids.WAVPACK, "WavPack", "WV", (0, b"wvpk"))
WAVPACK.add_extension("wv")
for mime in ("audio/wavpack", "audio/x-wavpack"):
    WAVPACK.add_mime_type(mime)

MUSEPACK = _magic(ids.MUSEPACK, "Musepack / MPEGplus", "MPC", (0, b"MP+"), (0, b"MPCK"))
for ext in ("mpc", "mp+", "mpp"):
    MUSEPACK.add_extension(ext)
for mime in ("audio/musepack", "audio/x-musepack"):
    MUSEPACK.add_mime_type(mime)

TTA = _magic(ids.TTA, "True Audio", "TTA", (0, b"TTA1"))
TTA.add_extension("tta")
for mime in ("audio/tta", "audio/x-tta"):
    TTA.add_mime_type(mime)

# DSF keeps its ID3v2 tag at the end of the file, no search needed
DSF = FormatDescriptor(ids.DSF, "Direct Stream Digital", "DSD", header_check=prefix_signature((0, b"DSD ")))
DSF.add_extension("dsf")
for mime in ("audio/dsf", "audio/x-dsf"):
    DSF.add_mime_type(mime)

for _fmt in (FLAC, APE, WAVPACK, MUSEPACK, TTA, DSF):
    _REGISTRY.register(_fmt, priority=50)
