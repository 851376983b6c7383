from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional

from ..core.model import FormatDescriptor
from ..core.registry import _REGISTRY
from ..core.signatures import after_id3v2, iter_chunks, skip_id3v2
from . import ids

# kbit/s, index 0 = free format, 15 = invalid
_BITRATES = {
    (1, 1): (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
    (1, 2): (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
    (1, 3): (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    (2, 1): (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
    (2, 2): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
    (2, 3): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
}
_SAMPLE_RATES = {
    1: (44100, 48000, 32000),
    2: (22050, 24000, 16000),
    25: (11025, 12000, 8000),
}
_VERSIONS = {0b00: 25, 0b10: 2, 0b11: 1}      # 0b01 is reserved
_LAYERS = {0b01: 3, 0b10: 2, 0b11: 1}         # 0b00 is reserved

FRAME_HEADER_SIZE = 4


@dataclass(slots=True, frozen=True)
class FrameHeader:
    version: int          # 1, 2 or 25 (MPEG 2.5)
    layer: int
    bitrate: int          # kbit/s, 0 for free format
    sample_rate: int
    padding: int

    @property
    def frame_length(self) -> int:
        """Frame size in bytes; 0 when it cannot be computed (free format)."""
        if not self.bitrate:
            return 0
        if self.layer == 1:
            return (12 * self.bitrate * 1000 // self.sample_rate + self.padding) * 4
        coeff = 72 if self.layer == 3 and self.version != 1 else 144
        return coeff * self.bitrate * 1000 // self.sample_rate + self.padding

    def continues(self, other: FrameHeader) -> bool:
        return (self.version, self.layer, self.sample_rate) == (other.version, other.layer, other.sample_rate)


def parse_frame_header(data: bytes) -> Optional[FrameHeader]:
    """Decode a 4-byte MPEG audio frame header, or None if ``data`` is not one."""
    if len(data) < FRAME_HEADER_SIZE:
        return None
    b0, b1, b2, b3 = data[0], data[1], data[2], data[3]
    if b0 != 0xFF or (b1 & 0xE0) != 0xE0:
        return None
    version = _VERSIONS.get((b1 >> 3) & 0x03)
    layer = _LAYERS.get((b1 >> 1) & 0x03)
    bitrate_index = b2 >> 4
    rate_index = (b2 >> 2) & 0x03
    if version is None or layer is None or bitrate_index == 15 or rate_index == 3:
        return None
    if (b3 & 0x03) == 0b10:  # reserved emphasis
        return None
    table = _BITRATES[(1 if version == 1 else 2, layer)]
    return FrameHeader(
        version=version,
        layer=layer,
        bitrate=table[bitrate_index],
        sample_rate=_SAMPLE_RATES[version][rate_index],
        padding=(b2 >> 1) & 0x01,
    )


def check_frames(data: bytes) -> bool:
    """A valid frame at 0, confirmed by the following frame when it is in ``data``."""
    header = parse_frame_header(data)
    if header is None:
        return False
    length = header.frame_length
    if not length or length + FRAME_HEADER_SIZE > len(data):
        return True
    following = parse_frame_header(data[length:length + FRAME_HEADER_SIZE])
    return following is not None and following.continues(header)


def search_frames(stream: BinaryIO) -> bool:
    """Find two consecutive frames anywhere after the leading ID3v2 tags."""
    base = skip_id3v2(stream)
    stream.seek(base)
    tail = b""
    for chunk in iter_chunks(stream):
        window = tail + chunk
        window_start = base - len(tail)
        idx = window.find(b"\xff")
        while idx != -1 and idx + FRAME_HEADER_SIZE <= len(window):
            header = parse_frame_header(window[idx:idx + FRAME_HEADER_SIZE])
            if header is not None and header.frame_length:
                resume = stream.tell()
                stream.seek(window_start + idx + header.frame_length)
                following = parse_frame_header(stream.read(FRAME_HEADER_SIZE))
                stream.seek(resume)
                if following is not None and following.continues(header):
                    return True
            idx = window.find(b"\xff", idx + 1)
        base += len(chunk)
        tail = window[-(FRAME_HEADER_SIZE - 1):]
    return False


def check_adts(data: bytes) -> bool:
    """ADTS sync word with layer 0; the protection bit may be either value."""
    return len(data) >= 7 and data[0] == 0xFF and (data[1] & 0xF6) == 0xF0 and ((data[2] >> 2) & 0x0F) < 13


MPEG = FormatDescriptor(ids.MPEG, "MPEG Audio", "MPEG", header_check=check_frames, stream_search=search_frames)
for ext in ("mp1", "mp2", "mp3", "mpa"):
    MPEG.add_extension(ext)
for mime in ("audio/mpeg", "audio/mp3", "audio/mpa", "audio/mpa-robust"):
    MPEG.add_mime_type(mime)

AAC_ADTS = FormatDescriptor(
    ids.AAC_ADTS, "Advanced Audio Coding (ADTS)", "AAC",
    header_check=check_adts, stream_search=after_id3v2(check_adts),
)
AAC_ADTS.add_extension("aac")
for mime in ("audio/aac", "audio/aacp", "audio/x-aac"):
    AAC_ADTS.add_mime_type(mime)

# frame-sync signatures are weak: examine them after every magic-number format
_REGISTRY.register(AAC_ADTS, priority=190)
_REGISTRY.register(MPEG, priority=200)
