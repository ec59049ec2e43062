"""Zero-crossing detection."""

from __future__ import annotations

import numpy as np


def find_zero_crossings(samples) -> np.ndarray:
    """
    Indices where the sign of the signal changes.

    Zero counts as non-negative, so -0.2 -> 0.0 is a crossing and 0.0 -> 0.3
    is not. The index recorded is that of the first sample with the new sign.
    Fewer than two samples gives an empty array.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size < 2:
        return np.zeros(0, dtype=np.int64)
    non_negative = samples >= 0.0
    changed = non_negative[1:] != non_negative[:-1]
    return (np.flatnonzero(changed) + 1).astype(np.int64)
