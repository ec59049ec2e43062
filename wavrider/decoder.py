"""
Decode pipeline: WAV -> samples -> zero-crossings -> half-cycle classes -> bytes.

Every stage materialises its whole output before the next one starts, and all
run state lives in the FskDemodulator created for the call, so decoding the
same input twice gives identical bytes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from wavrider.config import DecoderConfig
from wavrider.crossings import find_zero_crossings
from wavrider.demodulator import Event, FskDemodulator
from wavrider.intervals import classify_crossings
from wavrider.samples import SampleStream, read_wav


@dataclass
class DecodeResult:
    data:        bytes
    blocks:      List[bytes]
    n_samples:   int
    n_crossings: int
    sample_rate: int
    events:      List[Event] = field(default_factory=list)


def describe_stream(stream: SampleStream) -> None:
    print(f"WAV: {stream.sample_rate} Hz, {stream.n_channels} ch, "
          f"{stream.sample_width * 8}-bit, {stream.duration_s:.2f}s")
    print(f"Read {len(stream)} samples")


def decode_samples(
    stream:  SampleStream,
    config:  Optional[DecoderConfig] = None,
    verbose: bool = False,
    show_events: bool = False,
) -> DecodeResult:
    config = config or DecoderConfig()

    crossings = find_zero_crossings(stream.samples)
    if verbose:
        print(f"Detected {len(crossings)} zero crossings")

    tones = classify_crossings(crossings, stream.sample_rate, config)

    dem = FskDemodulator(config)
    events: List[Event] = []
    for tone in tones:
        new = dem.feed(tone)
        events.extend(new)
        if show_events:
            for ev in new:
                print(str(ev))

    if verbose:
        print(f"Decoded {len(dem.data)} bytes in {len(dem.blocks)} block(s)")

    return DecodeResult(
        data        = dem.data,
        blocks      = dem.blocks,
        n_samples   = len(stream.samples),
        n_crossings = len(crossings),
        sample_rate = stream.sample_rate,
        events      = events,
    )


def decode_file(
    path:    str,
    config:  Optional[DecoderConfig] = None,
    verbose: bool = True,
    show_events: bool = False,
) -> DecodeResult:
    stream = read_wav(path)
    if verbose:
        describe_stream(stream)
    return decode_samples(stream, config, verbose=verbose, show_events=show_events)
