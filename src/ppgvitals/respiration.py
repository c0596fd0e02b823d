"""Respiration rate from the pulse amplitude envelope.

Breathing modulates the pulse amplitude (respiratory sinus arrhythmia and
intrathoracic pressure), so the dominant frequency of the envelope within
the breathing band approximates the respiration rate.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.signal import hilbert


def amplitude_envelope(x: np.ndarray) -> np.ndarray:
    """Magnitude of the analytic signal of ``x`` (mean removed)."""
    x = np.asarray(x, dtype=np.float64)
    return np.abs(hilbert(x - float(np.mean(x))))


def respiratory_rate(
    filtered: np.ndarray,
    fs: float,
    rr_min_hz: float = 0.1,
    rr_max_hz: float = 0.5,
    min_duration_sec: float = 20.0,
) -> Optional[float]:
    """Breaths per minute, or ``None`` when the window is too short.

    Args:
        filtered: band-limited pulse signal.
        fs: sampling rate (Hz).
        rr_min_hz/rr_max_hz: breathing band (Hz).
        min_duration_sec: shortest window that resolves the breathing band.
    """
    x = np.asarray(filtered, dtype=np.float64)
    if fs <= 0 or x.size < max(8, int(min_duration_sec * fs)):
        return None
    env = amplitude_envelope(x)
    std = float(np.std(env))
    if std <= 0.0:
        return None
    env = (env - float(np.mean(env))) / std
    mag = np.abs(np.fft.rfft(env * np.hanning(env.size)))
    freqs = np.fft.rfftfreq(env.size, d=1.0 / fs)
    band = (freqs >= rr_min_hz) & (freqs <= rr_max_hz)
    if not np.any(band):
        return None
    f_rr = float(freqs[int(np.argmax(mag * band))])
    return round(60.0 * f_rr, 1) if f_rr > 0 else None
