"""Beat-to-beat interval validation.

Intervals are measured in samples between consecutive peaks. Outliers
(ectopic beats, missed beats, noise peaks) are removed relative to the median
interval, which needs no distributional assumption.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import IntervalConfig
from .models import HrvMetrics, VitalsError


@dataclass
class IntervalResult:
    raw: np.ndarray  # all consecutive differences (samples)
    valid: np.ndarray  # survivors of outlier rejection (samples)
    error: Optional[VitalsError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def yield_ratio(self) -> float:
        return float(self.valid.size) / float(self.raw.size) if self.raw.size else 0.0


def validate(peaks: np.ndarray, cfg: Optional[IntervalConfig] = None) -> IntervalResult:
    """Convert peak indices to intervals and drop outliers.

    Returns an :class:`IntervalResult` whose ``error`` is
    ``INSUFFICIENT_BEATS`` when fewer than ``min_peaks`` peaks were found and
    ``IRREGULAR_RHYTHM`` when fewer than ``min_valid_intervals`` intervals lie
    within ``outlier_fraction`` of the median.
    """
    cfg = cfg or IntervalConfig()
    p = np.asarray(peaks, dtype=np.int64)
    raw = np.diff(p) if p.size > 1 else np.zeros(0, dtype=np.int64)
    if np.any(raw <= 0):
        raise ValueError("peak indices must be strictly increasing")
    if p.size < cfg.min_peaks:
        return IntervalResult(raw, np.zeros(0, dtype=np.int64), VitalsError.INSUFFICIENT_BEATS)
    median = float(np.median(raw))
    keep = np.abs(raw - median) < cfg.outlier_fraction * median
    valid = raw[keep]
    if valid.size < cfg.min_valid_intervals:
        return IntervalResult(raw, valid, VitalsError.IRREGULAR_RHYTHM)
    return IntervalResult(raw, valid)


def coefficient_of_variation(values: np.ndarray) -> float:
    v = np.asarray(values, dtype=np.float64)
    if v.size == 0:
        return 0.0
    mean = float(np.mean(v))
    return float(np.std(v)) / mean if mean > 0 else 0.0


def hrv_metrics(valid: np.ndarray, fs: float) -> HrvMetrics:
    """RMSSD, SDNN (milliseconds) and CV of validated intervals."""
    ms = np.asarray(valid, dtype=np.float64) * (1000.0 / fs)
    diffs = np.diff(ms)
    rmssd = float(np.sqrt(np.mean(diffs * diffs))) if diffs.size else 0.0
    return HrvMetrics(
        rmssd_ms=round(rmssd, 1),
        sdnn_ms=round(float(np.std(ms)), 1),
        irregularity=round(coefficient_of_variation(ms), 4),
    )
