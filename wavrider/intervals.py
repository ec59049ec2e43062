"""
Half-cycle classification.

The time between two adjacent zero-crossings is one half-cycle of whatever
tone was on the tape. Two thresholds split it into three buckets:

    SHORT   d <  short threshold              2 kHz "0" bits, sync
    MEDIUM  short threshold <= d < long       1 kHz "1" bits
    LONG    d >= long threshold               770 Hz leader / end of data
"""

from __future__ import annotations

from enum import Enum, auto
from typing import List, Optional

import numpy as np

from wavrider.config import DecoderConfig


class ToneClass(Enum):
    SHORT  = auto()
    MEDIUM = auto()
    LONG   = auto()


def classify_duration(duration_s: float, config: Optional[DecoderConfig] = None) -> ToneClass:
    config = config or DecoderConfig()
    if duration_s < config.short_threshold_s:
        return ToneClass.SHORT
    if duration_s < config.long_threshold_s:
        return ToneClass.MEDIUM
    return ToneClass.LONG


def half_cycle_durations(crossings, sample_rate: int) -> np.ndarray:
    """Seconds between each adjacent pair of crossings."""
    crossings = np.asarray(crossings, dtype=np.int64)
    if crossings.size < 2:
        return np.zeros(0, dtype=np.float64)
    return np.diff(crossings) / float(sample_rate)


def classify_crossings(crossings, sample_rate: int,
                       config: Optional[DecoderConfig] = None) -> List[ToneClass]:
    config = config or DecoderConfig()
    return [classify_duration(float(d), config)
            for d in half_cycle_durations(crossings, sample_rate)]
