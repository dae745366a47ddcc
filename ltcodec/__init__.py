"""Encoding and decoding of SMPTE linear timecode audio, with a buffer-based transport layer."""

__version__ = "0.1.0"