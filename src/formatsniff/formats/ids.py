"""Stable ids of the built-in formats."""

MPEG = 10
AAC_ADTS = 11
MP4 = 20
ASF = 21
OGG = 30
OPUS = 31
FLAC = 40
APE = 41
WAVPACK = 42
MUSEPACK = 43
TTA = 44
DSF = 45
WAV = 50
AIFF = 51
AIFC = 52
MIDI = 60
