#!/usr/bin/env python3
"""
Half-cycle statistics for a cassette recording.

Prints how many half-cycles land in each tone bucket and, optionally, plots
the duration histogram with the two classification thresholds drawn in. Handy
for checking whether a tape was recorded at the wrong speed before touching
the thresholds.

Usage:
    python -m wavrider.analyse tape.wav
    python -m wavrider.analyse tape.wav --plot halfcycles.png

Requirements: pip install numpy matplotlib
"""

from __future__ import annotations

import sys
from typing import Dict, Optional

import numpy as np

from wavrider.config import DecoderConfig
from wavrider.crossings import find_zero_crossings
from wavrider.intervals import ToneClass, classify_duration, half_cycle_durations
from wavrider.samples import SampleStream, read_wav


def tone_statistics(durations: np.ndarray,
                    config: Optional[DecoderConfig] = None) -> Dict[ToneClass, dict]:
    """Count and mean duration (us) per ToneClass."""
    config = config or DecoderConfig()
    stats = {tc: {"count": 0, "mean_us": 0.0} for tc in ToneClass}
    if durations.size == 0:
        return stats

    classes = np.array([classify_duration(float(d), config).value for d in durations])
    for tc in ToneClass:
        sel = durations[classes == tc.value]
        stats[tc]["count"] = int(sel.size)
        stats[tc]["mean_us"] = float(np.mean(sel) * 1e6) if sel.size else 0.0
    return stats


def print_report(stats: Dict[ToneClass, dict]) -> None:
    total = sum(s["count"] for s in stats.values())
    print(f"{'Class':<8} {'Count':>8} {'Share':>7} {'Mean us':>9}")
    print("-" * 35)
    for tc, s in stats.items():
        share = 100.0 * s["count"] / total if total else 0.0
        print(f"{tc.name:<8} {s['count']:>8} {share:>6.1f}% {s['mean_us']:>9.1f}")


def plot_histogram(durations: np.ndarray, path: str,
                   config: Optional[DecoderConfig] = None, title: str = "") -> None:
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    config = config or DecoderConfig()
    us = durations * 1e6
    upper = max(config.long_threshold_us * 1.5, float(np.percentile(us, 99.5)) if us.size else 0.0)

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.hist(us, bins=200, range=(0.0, upper), color="steelblue")
    ax.axvline(config.short_threshold_us, color="darkorange", linestyle="--", linewidth=1.2,
               label=f"SHORT/MEDIUM {config.short_threshold_us:.0f} us")
    ax.axvline(config.long_threshold_us, color="crimson", linestyle="--", linewidth=1.2,
               label=f"MEDIUM/LONG {config.long_threshold_us:.0f} us")
    ax.set_xlabel("Half-cycle duration (us)")
    ax.set_ylabel("Count")
    ax.set_title(title or "Half-cycle durations")
    ax.legend(fontsize=9)
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(path, dpi=150)
    plt.close(fig)


def analyse_stream(stream: SampleStream, config: Optional[DecoderConfig] = None,
                   plot_path: Optional[str] = None, title: str = "") -> Dict[ToneClass, dict]:
    durations = half_cycle_durations(find_zero_crossings(stream.samples), stream.sample_rate)
    stats = tone_statistics(durations, config)
    if plot_path:
        plot_histogram(durations, plot_path, config, title)
    return stats


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Half-cycle statistics for a cassette WAV")
    parser.add_argument("wav", help="Input WAV file")
    parser.add_argument("--plot", default=None, help="Save a duration histogram to this PNG")
    args = parser.parse_args()

    stream = read_wav(args.wav)
    stats = analyse_stream(stream, plot_path=args.plot, title=args.wav)
    print_report(stats)
    if args.plot:
        print(f"\nHistogram saved to: {args.plot}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
