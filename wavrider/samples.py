"""
PCM sample extraction.

Turns the raw interleaved frames of a WAV file into one normalised float
channel. Only the first channel is kept; the decoder never mixes channels.
"""

from __future__ import annotations

import struct
import wave
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from wavrider.errors import MalformedContainer, UnsupportedFormat

WAVE_FORMAT_PCM        = 0x0001
WAVE_FORMAT_EXTENSIBLE = 0xFFFE


@dataclass
class SampleStream:
    samples:      np.ndarray   # float64, channel 0, in [-1.0, 1.0]
    sample_rate:  int
    n_channels:   int
    sample_width: int          # bytes per sample in the source file

    def __len__(self):
        return len(self.samples)

    @property
    def duration_s(self) -> float:
        return len(self.samples) / self.sample_rate


def extract_samples(raw: bytes, sample_width: int, n_channels: int) -> np.ndarray:
    """
    Normalise raw PCM frames to floats, keeping channel 0 only.

    sample_width is in bytes: 1 = 8-bit unsigned, 2 = 16-bit signed little
    endian. Anything else raises UnsupportedFormat. A trailing partial frame
    is dropped.
    """
    if n_channels < 1:
        raise MalformedContainer(f"invalid channel count: {n_channels}")

    if sample_width == 1:
        data = np.frombuffer(raw, dtype=np.uint8)
    elif sample_width == 2:
        data = np.frombuffer(raw[:len(raw) - len(raw) % 2], dtype="<i2")
    else:
        raise UnsupportedFormat(f"unsupported bits per sample: {sample_width * 8}")

    n_frames = len(data) // n_channels
    data = data[:n_frames * n_channels]
    if n_channels > 1:
        data = data.reshape(-1, n_channels)[:, 0]

    if sample_width == 1:
        return (data.astype(np.float64) - 128.0) / 128.0
    return data.astype(np.float64) / 32768.0


def _read_riff_chunks(path: str) -> Tuple[int, int, int, int, bytes]:
    """
    Walk the RIFF chunks of a WAV file the stdlib reader refused.

    Returns (format tag, channels, sample rate, bits per sample, data bytes).
    For WAVE_FORMAT_EXTENSIBLE the tag is taken from the SubFormat GUID.
    """
    with open(path, "rb") as f:
        blob = f.read()

    if len(blob) < 12 or blob[:4] != b"RIFF" or blob[8:12] != b"WAVE":
        raise MalformedContainer(f"invalid WAV file {path}: not a RIFF/WAVE file")

    fmt = data = None
    idx = 12
    while idx + 8 <= len(blob) and data is None:
        chunk_id = blob[idx:idx + 4]
        size = struct.unpack_from("<I", blob, idx + 4)[0]
        body = blob[idx + 8:idx + 8 + size]
        if chunk_id == b"fmt ":
            fmt = body
        elif chunk_id == b"data":
            data = body
        idx += 8 + size + (size % 2)

    if fmt is None or len(fmt) < 16:
        raise MalformedContainer(f"invalid WAV file {path}: fmt chunk not found")
    tag, n_ch, sr, _, _, bits = struct.unpack_from("<HHIIHH", fmt)
    if tag == WAVE_FORMAT_EXTENSIBLE and len(fmt) >= 26:
        tag = struct.unpack_from("<H", fmt, 24)[0]
    if data is None:
        raise MalformedContainer(f"invalid WAV file {path}: data chunk not found")
    return tag, n_ch, sr, bits, data


def read_wav(path: str) -> SampleStream:
    """Read a PCM WAV file into a SampleStream (channel 0 only)."""
    try:
        with wave.open(path, "rb") as wf:
            sr           = wf.getframerate()
            n_ch         = wf.getnchannels()
            sample_width = wf.getsampwidth()
            raw          = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError):
        # wave rejects EXTENSIBLE headers before 3.12 and every non-PCM tag
        tag, n_ch, sr, bits, raw = _read_riff_chunks(path)
        if bits not in (8, 16):
            raise UnsupportedFormat(f"unsupported bits per sample: {bits}")
        if tag != WAVE_FORMAT_PCM:
            raise UnsupportedFormat(f"unsupported WAV format tag: {tag:#06x}")
        sample_width = bits // 8

    if sr <= 0:
        raise MalformedContainer(f"invalid sample rate: {sr}")

    samples = extract_samples(raw, sample_width, n_ch)
    return SampleStream(samples=samples, sample_rate=sr, n_channels=n_ch,
                        sample_width=sample_width)
