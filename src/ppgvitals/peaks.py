"""Pulse peak detection on a filtered window."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from .config import PeakConfig
from .models import Peak


def refractory_samples(fs: float, max_bpm: float = 220.0) -> int:
    """Minimum gap between accepted peaks: one beat period at ``max_bpm``."""
    if not fs > 0:
        raise ValueError("sample rate must be positive")
    return max(1, int(round(fs * 60.0 / max_bpm)))


def find_peaks(
    filtered: np.ndarray,
    fs: float,
    cfg: Optional[PeakConfig] = None,
) -> np.ndarray:
    """Return sample indices of pulse peaks.

    A sample is a candidate when it is above ``mean + k * std`` and a local
    maximum over ``local_radius`` neighbours on each side. On a flat top the
    first sample wins (strict on the left, non-strict against the immediate
    right neighbour). Candidates closer than the refractory distance to the
    last accepted peak are discarded, never merged.
    """
    cfg = cfg or PeakConfig()
    x = np.asarray(filtered, dtype=np.float64)
    if x.ndim != 1 or x.size == 0:
        raise ValueError("filtered must be a non-empty 1D array")
    r = int(cfg.local_radius)
    std = float(np.std(x))
    if x.size < 2 * r + 1 or std < cfg.flat_std:
        return np.zeros(0, dtype=np.int64)
    threshold = float(np.mean(x)) + cfg.threshold_k * std
    refractory = refractory_samples(fs, cfg.max_bpm)

    n = x.size
    centre = x[r : n - r]
    cand = centre > threshold
    for k in range(1, r + 1):
        cand &= centre > x[r - k : n - r - k]
        right = x[r + k : n - r + k]
        cand &= (centre >= right) if k == 1 else (centre > right)
    candidates = np.flatnonzero(cand) + r

    peaks: List[int] = []
    for i in candidates:
        if peaks and i - peaks[-1] < refractory:
            continue
        peaks.append(int(i))
    return np.asarray(peaks, dtype=np.int64)


def peak_list(filtered: np.ndarray, indices: np.ndarray) -> List[Peak]:
    """Pair peak indices with their filtered amplitudes."""
    x = np.asarray(filtered, dtype=np.float64)
    return [Peak(index=int(i), amplitude=float(x[i])) for i in indices]
