#!/usr/bin/env python3
"""
Generate FSK cassette WAV files for testing the decoder.

Each record on the tape is:
- leader tone at 770 Hz (650 us half-cycles)
- sync bit: one 200 us and one 250 us half-cycle
- data bits, MSB first: "0" = one 2 kHz cycle, "1" = one 1 kHz cycle
- a short burst of leader tone, which the decoder reads as end of data

Noise is optional: bandlimited white Gaussian noise mixed at a given SNR,
where SNR is tone RMS relative to noise RMS over the whole file.

Usage:
    python -m wavrider.tape_generator payload.bin tape.wav
    python -m wavrider.tape_generator header.bin body.bin tape.wav --bits 8 --channels 2
    python -m wavrider.tape_generator payload.bin tape.wav --snr 6 --bandwidth 3500

Requirements:
    pip install numpy scipy
"""

from __future__ import annotations

import os
import wave
from typing import List, Optional, Sequence, Union

import numpy as np
from scipy.signal import butter, sosfilt

SAMPLE_RATE       = 44_100
LEADER_HZ         = 770.0
ZERO_HZ           = 2000.0
ONE_HZ            = 1000.0
SYNC_HALF_CYCLES  = (200e-6, 250e-6)
LEADER_SEC        = 2.0
TRAILER_SEC       = 0.1
AMPLITUDE         = 0.8
DEFAULT_BANDWIDTH = 3500
PEAK_LIMIT        = 0.98


def _half(freq_hz: float) -> float:
    return 0.5 / freq_hz


def encode_record(
    data:        bytes,
    leader_sec:  float = LEADER_SEC,
    trailer_sec: float = TRAILER_SEC,
) -> List[float]:
    """Half-cycle durations (seconds) for one leader + sync + data + trailer record."""
    n_leader  = max(2, int(round(leader_sec * 2.0 * LEADER_HZ)))
    n_trailer = max(2, int(round(trailer_sec * 2.0 * LEADER_HZ)))

    durations = [_half(LEADER_HZ)] * n_leader
    durations.extend(SYNC_HALF_CYCLES)
    for byte in data:
        for bit in range(7, -1, -1):
            half = _half(ONE_HZ) if (byte >> bit) & 1 else _half(ZERO_HZ)
            durations.extend((half, half))
    durations.extend([_half(LEADER_HZ)] * n_trailer)
    return durations


def encode_tape(
    blocks:      Union[bytes, Sequence[bytes]],
    leader_sec:  float = LEADER_SEC,
    trailer_sec: float = TRAILER_SEC,
) -> np.ndarray:
    """Half-cycle durations for one or more records laid end to end."""
    if isinstance(blocks, (bytes, bytearray)):
        blocks = [bytes(blocks)]
    durations: List[float] = []
    for block in blocks:
        durations.extend(encode_record(block, leader_sec, trailer_sec))
    return np.asarray(durations, dtype=np.float64)


def render_halfcycles(durations, sample_rate: int = SAMPLE_RATE,
                      amplitude: float = AMPLITUDE) -> np.ndarray:
    """
    Render alternating-sign sine half-cycles of the given durations.

    Samples are taken at the centre of each sample period so none lands
    exactly on a zero.
    """
    durations = np.asarray(durations, dtype=np.float64)
    if durations.size == 0:
        return np.zeros(0, dtype=np.float64)

    edges = np.concatenate(([0.0], np.cumsum(durations)))
    n = int(np.ceil(edges[-1] * sample_rate - 1e-9))
    t = (np.arange(n, dtype=np.float64) + 0.5) / sample_rate

    k = np.searchsorted(edges, t, side="right") - 1
    k = np.clip(k, 0, len(durations) - 1)
    frac = (t - edges[k]) / durations[k]
    sign = np.where(k % 2 == 0, 1.0, -1.0)
    return amplitude * sign * np.sin(np.pi * np.clip(frac, 0.0, 1.0))


def lowpass(x: np.ndarray, sample_rate: int, cutoff_hz: float, order: int = 8) -> np.ndarray:
    """Butterworth lowpass; a cutoff at or past Nyquist leaves x untouched."""
    if cutoff_hz >= sample_rate / 2.0:
        return x
    sos = butter(order, cutoff_hz, btype="low", fs=sample_rate, output="sos")
    return sosfilt(sos, x)


def add_noise(
    signal:       np.ndarray,
    sample_rate:  int,
    snr_db:       float,
    bandwidth_hz: float = DEFAULT_BANDWIDTH,
    rng:          Optional[np.random.Generator] = None,
) -> np.ndarray:
    rng = rng or np.random.default_rng(48)
    tone_rms = float(np.sqrt(np.mean(signal * signal))) if signal.size else 0.0
    if tone_rms <= 0:
        return signal.copy()

    noise = lowpass(rng.standard_normal(signal.size), sample_rate, bandwidth_hz)
    noise_rms = float(np.sqrt(np.mean(noise * noise)))
    if noise_rms > 0:
        noise *= tone_rms / (noise_rms * 10.0 ** (snr_db / 20.0))

    mix = signal + noise
    peak = float(np.max(np.abs(mix)))
    if peak > PEAK_LIMIT:
        mix *= PEAK_LIMIT / peak
    return mix


def to_pcm(samples: np.ndarray, sample_width: int = 2, n_channels: int = 1) -> bytes:
    """
    Interleaved PCM bytes. Channel 0 carries the signal, any further channels
    are silent.
    """
    clipped = np.clip(samples, -1.0, 1.0)
    if sample_width == 1:
        mono = (np.round(clipped * 127.0) + 128.0).astype(np.uint8)
        silence = 128
    elif sample_width == 2:
        mono = np.round(clipped * 32767.0).astype("<i2")
        silence = 0
    else:
        raise ValueError(f"sample_width must be 1 or 2, got {sample_width}")

    if n_channels == 1:
        return mono.tobytes()
    frames = np.full((mono.size, n_channels), silence, dtype=mono.dtype)
    frames[:, 0] = mono
    return frames.tobytes()


def write_wav(path: str, samples: np.ndarray, sample_rate: int = SAMPLE_RATE,
              sample_width: int = 2, n_channels: int = 1) -> None:
    pcm = to_pcm(samples, sample_width, n_channels)
    with wave.open(path, "wb") as wf:
        wf.setnchannels(n_channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)


def make_tape(
    blocks:       Union[bytes, Sequence[bytes]],
    sample_rate:  int = SAMPLE_RATE,
    leader_sec:   float = LEADER_SEC,
    trailer_sec:  float = TRAILER_SEC,
    snr_db:       Optional[float] = None,
    bandwidth_hz: float = DEFAULT_BANDWIDTH,
    seed:         int = 48,
) -> np.ndarray:
    """Float waveform of a complete tape, optionally with noise."""
    durations = encode_tape(blocks, leader_sec, trailer_sec)
    signal = render_halfcycles(durations, sample_rate)
    if snr_db is not None:
        signal = add_noise(signal, sample_rate, snr_db, bandwidth_hz,
                           np.random.default_rng(seed))
    return signal


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(
        description="Generate an FSK cassette WAV file from binary payloads.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("inputs", nargs="+",
                        help="Payload file(s), one tape record each, followed by the output WAV")
    parser.add_argument("--rate", type=int, default=SAMPLE_RATE, help="Sample rate in Hz")
    parser.add_argument("--bits", type=int, choices=(8, 16), default=16, help="Bits per sample")
    parser.add_argument("--channels", type=int, default=1, help="Channel count (signal on channel 0)")
    parser.add_argument("--leader", type=float, default=LEADER_SEC, help="Leader tone length in seconds")
    parser.add_argument("--trailer", type=float, default=TRAILER_SEC, help="Trailing tone length in seconds")
    parser.add_argument("--snr", type=float, default=None, help="Mix in noise at this SNR (dB)")
    parser.add_argument("--bandwidth", type=float, default=DEFAULT_BANDWIDTH, help="Noise bandwidth in Hz")
    parser.add_argument("--seed", type=int, default=48, help="Noise RNG seed")
    args = parser.parse_args()

    if len(args.inputs) < 2:
        parser.error("need at least one payload file and an output WAV")
    *payload_paths, out_path = args.inputs

    blocks = []
    for p in payload_paths:
        with open(p, "rb") as f:
            blocks.append(f.read())

    signal = make_tape(blocks, args.rate, args.leader, args.trailer,
                       args.snr, args.bandwidth, args.seed)

    out_dir = os.path.dirname(os.path.abspath(out_path))
    os.makedirs(out_dir, exist_ok=True)
    write_wav(out_path, signal, args.rate, args.bits // 8, args.channels)

    snr = f"SNR{args.snr:+.0f}dB" if args.snr is not None else "clean"
    print(f"wrote {out_path}  ({len(blocks)} record(s), "
          f"{sum(len(b) for b in blocks)} bytes, {len(signal) / args.rate:.2f}s, {snr})")


if __name__ == "__main__":
    main()
