"""Built-in audio formats; importing this package registers them."""

from . import ids
from .containers import ASF, MP4, OGG, OPUS
from .iff import AIFC, AIFF, MIDI, WAV
from .lossless import APE, DSF, FLAC, MUSEPACK, TTA, WAVPACK
from .mpeg import AAC_ADTS, MPEG
