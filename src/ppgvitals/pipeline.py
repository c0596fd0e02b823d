"""Batch analysis: filter, detect peaks, validate intervals, estimate."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from .config import EngineConfig
from .estimator import estimate
from .intervals import validate
from .models import Method, QualitySnapshot, ScanResult, VitalsError
from .peaks import find_peaks
from .preprocess import filter_signal

logger = logging.getLogger(__name__)


def min_samples(fs: float, cfg: Optional[EngineConfig] = None) -> int:
    """Shortest buffer that may be analysed at sample rate ``fs``."""
    cfg = cfg or EngineConfig()
    return int(math.ceil(cfg.session.min_duration_sec * fs))


def analyze_signal(
    raw: np.ndarray,
    sample_rate_hz: float,
    quality_history: Sequence[QualitySnapshot] = (),
    method: Method = Method.CAMERA,
    cfg: Optional[EngineConfig] = None,
) -> ScanResult:
    """Run the full estimation chain over one buffered window.

    Without ``quality_history`` the coupling term of the confidence is 0, so
    callers that measured contact should pass their snapshots.
    """
    cfg = cfg or EngineConfig()
    x = np.asarray(raw, dtype=np.float64)
    if x.ndim != 1 or x.size == 0:
        raise ValueError("raw must be a non-empty 1D array")
    if not sample_rate_hz > 0:
        raise ValueError("sample rate must be positive")
    need = min_samples(sample_rate_hz, cfg)
    if x.size < need:
        return ScanResult.failure(
            VitalsError.INSUFFICIENT_SAMPLES,
            f"Collected {x.size} samples, need at least {need}. Scan for longer.",
        )
    filtered = filter_signal(x, sample_rate_hz, cfg.filter)
    peaks = find_peaks(filtered, sample_rate_hz, cfg.peaks)
    intervals = validate(peaks, cfg.intervals)
    logger.debug(
        "%d peaks, %d/%d intervals kept", peaks.size, intervals.valid.size, intervals.raw.size
    )
    return estimate(
        intervals,
        sample_rate_hz,
        quality_history,
        method=method,
        raw=x,
        filtered=filtered,
        sample_count=int(x.size),
        cfg=cfg,
    )
