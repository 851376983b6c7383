"""Multi-codec containers: Ogg, MP4, ASF."""

from __future__ import annotations

from ..core.model import FormatDescriptor
from ..core.registry import _REGISTRY
from ..core.signatures import matches_at, prefix_signature
from . import ids

OGG_PAGE = b"OggS"
OPUS_HEAD = b"OpusHead"
# first packet of the first page starts after the 27-byte header and a 1-entry lacing table
OGG_FIRST_PACKET = 28
ASF_HEADER_GUID = bytes.fromhex("3026b2758e66cf11a6d900aa0062ce6c")


def check_opus(data: bytes) -> bool:
    return matches_at(data, 0, OGG_PAGE) and matches_at(data, OGG_FIRST_PACKET, OPUS_HEAD)


OGG = FormatDescriptor(ids.OGG, "OGG", header_check=prefix_signature((0, OGG_PAGE)))
OGG.add_mime_type("audio/ogg")

OPUS = FormatDescriptor.copy_of(OGG)
OPUS.id = ids.OPUS
OPUS.name = "Opus (OGG)"
OPUS.short_name = "Opus"
OPUS.header_check = check_opus
OPUS.add_extension("opus")
OPUS.add_mime_type("audio/opus")

for ext in ("ogg", "oga", "ogx", "spx"):
    OGG.add_extension(ext)
OGG.add_mime_type("application/ogg")
OGG.add_mime_type("audio/vorbis")

MP4 = FormatDescriptor(
    ids.MP4, "MPEG-4 Part 14", "MP4",
    header_check=prefix_signature((4, b"ftyp")),
)
for ext in ("mp4", "m4a", "m4b", "m4p", "m4r", "m4v", "3gp"):
    MP4.add_extension(ext)
for mime in ("audio/mp4", "audio/x-m4a", "audio/m4a", "video/mp4", "audio/3gpp"):
    MP4.add_mime_type(mime)

ASF = FormatDescriptor(
    ids.ASF, "Windows Media Audio", "WMA",
    header_check=prefix_signature((0, ASF_HEADER_GUID)),
)
ASF.add_extension("wma")
ASF.add_extension("asf")
for mime in ("audio/x-ms-wma", "video/x-ms-asf", "application/vnd.ms-asf"):
    ASF.add_mime_type(mime)

# Opus pages also start with OggS: look at them first
_REGISTRY.register(OPUS, priority=40)
_REGISTRY.register(OGG, priority=50)
_REGISTRY.register(MP4, priority=50)
_REGISTRY.register(ASF, priority=50)
