"""Heart rate, confidence and SpO2 estimation from validated intervals."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from .config import EngineConfig, EstimatorConfig
from .intervals import IntervalResult, coefficient_of_variation, hrv_metrics
from .models import Method, Quality, QualitySnapshot, ScanResult, VitalsError, VitalsReading
from .quality import perfusion_index, pulse_snr_db
from .respiration import respiratory_rate

logger = logging.getLogger(__name__)


def interval_consistency(valid: np.ndarray) -> float:
    """1 - CV of the intervals, clamped to [0, 1]."""
    return float(np.clip(1.0 - coefficient_of_variation(valid), 0.0, 1.0))


def coupling_score(quality_history: Sequence[QualitySnapshot]) -> float:
    """Mean coupling quality over the session in [0, 1]; 0 without history."""
    if len(quality_history) == 0:
        return 0.0
    q = np.mean([s.coupling_quality for s in quality_history])
    return float(np.clip(q / 100.0, 0.0, 1.0))


def confidence_pct(
    consistency: float,
    coupling: float,
    yield_ratio: float,
    n_valid: int,
    cfg: Optional[EstimatorConfig] = None,
    snr_db: Optional[float] = None,
) -> int:
    """Blend the three [0, 1] terms into a percentage.

    The blend is clamped to [0, max_confidence] and then capped by two
    ceilings. The beat ceiling grows linearly with the number of valid
    intervals, reaching ``max_confidence`` at ``full_confidence_intervals``.
    The SNR ceiling grows linearly from 0 at ``snr_zero_db`` to
    ``max_confidence`` at ``snr_full_db``; it is skipped when ``snr_db`` is
    ``None``.
    """
    cfg = cfg or EstimatorConfig()
    a = float(np.clip(consistency, 0.0, 1.0))
    b = float(np.clip(coupling, 0.0, 1.0))
    c = float(np.clip(yield_ratio, 0.0, 1.0))
    blend = 100.0 * (cfg.w_consistency * a + cfg.w_coupling * b + cfg.w_yield * c)
    pct = int(np.clip(round(blend), 0, cfg.max_confidence))
    ceiling = cfg.max_confidence * min(1.0, n_valid / float(cfg.full_confidence_intervals))
    if snr_db is not None:
        span = max(1e-9, cfg.snr_full_db - cfg.snr_zero_db)
        snr_term = float(np.clip((snr_db - cfg.snr_zero_db) / span, 0.0, 1.0))
        ceiling = min(ceiling, cfg.max_confidence * snr_term)
    return min(pct, int(round(ceiling)))


def quality_label(confidence: int, cfg: Optional[EstimatorConfig] = None) -> Quality:
    cfg = cfg or EstimatorConfig()
    if confidence >= cfg.excellent_min:
        return Quality.EXCELLENT
    if confidence >= cfg.good_min:
        return Quality.GOOD
    if confidence >= cfg.fair_min:
        return Quality.FAIR
    return Quality.POOR


def spo2_estimate(raw: np.ndarray, cfg: Optional[EstimatorConfig] = None) -> float:
    """Heuristic SpO2 from the coefficient of variation of the raw signal.

    A single RGB channel cannot measure oxygen saturation; this is an
    explicitly low-confidence estimate and must be presented as such.
    Camera channel means are positive; a window whose mean is not positive
    has a CV of 0 and yields the baseline.
    """
    cfg = cfg or EstimatorConfig()
    cv = coefficient_of_variation(np.asarray(raw, dtype=np.float64))
    spo2 = cfg.spo2_baseline - cfg.spo2_cv_scale * cv
    return round(float(np.clip(spo2, cfg.spo2_min, cfg.spo2_max)), 1)


def estimate(
    intervals: IntervalResult,
    sample_rate_hz: float,
    quality_history: Sequence[QualitySnapshot] = (),
    method: Method = Method.CAMERA,
    raw: Optional[np.ndarray] = None,
    filtered: Optional[np.ndarray] = None,
    sample_count: Optional[int] = None,
    cfg: Optional[EngineConfig] = None,
) -> ScanResult:
    """Turn validated intervals into a :class:`VitalsReading`.

    Args:
        intervals: output of :func:`ppgvitals.intervals.validate`.
        sample_rate_hz: nominal sample rate of the session.
        quality_history: coupling snapshots collected during the scan.
        method: acquisition method; SpO2 is only estimated for the camera.
        raw: pre-filter signal, used for SNR (which caps confidence), SpO2
            and perfusion index.
        filtered: filtered signal, used for respiration.
        sample_count: number of samples analysed (defaults to ``len(raw)``).
        cfg: engine configuration.

    Returns:
        ScanResult with a reading, or a typed failure. BPM outside the
        physiological range is rejected, never clamped.
    """
    if not sample_rate_hz > 0:
        raise ValueError("sample rate must be positive")
    cfg = cfg or EngineConfig()
    ecfg = cfg.estimator
    if intervals.error is not None:
        return ScanResult.failure(intervals.error)

    valid = np.asarray(intervals.valid, dtype=np.float64)
    bpm = int(round(60.0 * sample_rate_hz / float(np.mean(valid))))
    if not ecfg.min_bpm <= bpm <= ecfg.max_bpm:
        logger.info("Rejected %d BPM outside [%d, %d]", bpm, ecfg.min_bpm, ecfg.max_bpm)
        return ScanResult.failure(
            VitalsError.OUT_OF_PHYSIOLOGICAL_RANGE,
            f"Detected {bpm} BPM, outside {ecfg.min_bpm}-{ecfg.max_bpm}. Please try again.",
        )

    snr = None
    spo2 = None
    perf = None
    if raw is not None:
        snr = pulse_snr_db(raw, sample_rate_hz, cfg.filter.f_low, cfg.filter.f_high)
        perf = perfusion_index(raw)
        if method is Method.CAMERA:
            spo2 = spo2_estimate(raw, ecfg)
    conf = confidence_pct(
        interval_consistency(valid),
        coupling_score(quality_history),
        intervals.yield_ratio,
        int(valid.size),
        ecfg,
        snr_db=snr,
    )
    rr = None
    if filtered is not None:
        rr = respiratory_rate(
            filtered,
            sample_rate_hz,
            ecfg.rr_min_hz,
            ecfg.rr_max_hz,
            ecfg.respiration_min_sec,
        )
    hrv = hrv_metrics(valid, sample_rate_hz) if valid.size >= ecfg.hrv_min_intervals else None
    if sample_count is None:
        sample_count = int(np.asarray(raw).size) if raw is not None else 0

    reading = VitalsReading(
        heart_rate_bpm=bpm,
        confidence_pct=conf,
        quality=quality_label(conf, ecfg),
        method=method,
        sample_count=int(sample_count),
        spo2_pct=spo2,
        snr_db=snr,
        hrv=hrv,
        respiratory_rate_brpm=rr,
        perfusion_index=perf,
    )
    logger.debug("Estimated %d BPM, confidence %d%%", bpm, conf)
    return ScanResult(reading=reading)
