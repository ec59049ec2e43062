"""Exceptions raised before or around the decode pipeline.

Once decoding has started nothing here is raised: a tape that runs out mid-byte
simply yields fewer bytes.
"""


class WavriderError(Exception):
    """Base class for everything the decoder raises on purpose."""


class UnsupportedFormat(WavriderError):
    """PCM sample width other than 8-bit unsigned or 16-bit signed."""


class MalformedContainer(WavriderError):
    """WAV framing is broken: no RIFF/fmt/data chunk, truncated header, etc."""


class ConfigError(WavriderError):
    """Decoder configuration value out of range."""
