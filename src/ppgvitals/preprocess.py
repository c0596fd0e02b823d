"""Detrending and band-limiting of raw pulse signals."""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.signal import butter, filtfilt

from .config import FilterConfig


def _check(x: np.ndarray, fs: Optional[float] = None) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1 or x.size == 0:
        raise ValueError("signal must be a non-empty 1D array")
    if fs is not None and not fs > 0:
        raise ValueError("sample rate must be positive")
    return x


def remove_dc(x: np.ndarray) -> np.ndarray:
    """Subtract the arithmetic mean of the whole window."""
    x = _check(x)
    return x - float(np.mean(x))


def moving_average(x: np.ndarray, half_width: int) -> np.ndarray:
    """Symmetric moving average with truncated windows at the edges.

    Sample i averages x[i - half_width : i + half_width + 1] clipped to the
    array, so edges use a shrinking window (no wrap-around, no zero padding).

    Args:
        x: 1D array.
        half_width: samples on each side of the centre (>=0).
    """
    x = _check(x)
    h = max(int(half_width), 0)
    if h == 0:
        return x.copy()
    n = x.size
    c = np.concatenate(([0.0], np.cumsum(x)))
    idx = np.arange(n)
    lo = np.maximum(idx - h, 0)
    hi = np.minimum(idx + h + 1, n)
    return (c[hi] - c[lo]) / (hi - lo)


def window_half_widths(fs: float, f_low: float, f_high: float) -> tuple[int, int]:
    """Half-widths of the smoothing and drift windows for a pass band.

    A box of length fs / f has its first null at f, so the short window
    suppresses content above ``f_high`` and the long one tracks content
    below ``f_low``.
    """
    short = max(1, int(fs / f_high) // 2)
    long = max(short + 1, int(round(fs / f_low)) // 2)
    return short, long


def moving_average_bandpass(
    x: np.ndarray,
    fs: float,
    f_low: float = 0.5,
    f_high: float = 4.0,
) -> np.ndarray:
    """Band-pass built from the difference of two symmetric moving averages."""
    x = _check(x, fs)
    short, long = window_half_widths(fs, f_low, f_high)
    return moving_average(x, short) - moving_average(x, long)


def bandpass(
    x: np.ndarray,
    fs: float,
    fmin: float = 0.5,
    fmax: float = 4.0,
    order: int = 3,
) -> np.ndarray:
    """Zero-phase Butterworth band-pass (filtfilt).

    Args:
        x: 1D array.
        fs: sampling rate [Hz].
        fmin: low cut [Hz].
        fmax: high cut [Hz].
        order: IIR order.
    """
    x = _check(x, fs)
    nyq = 0.5 * fs
    low = max(1e-6, fmin / nyq)
    high = min(0.999, fmax / nyq)
    if not (0 < low < high < 1) or x.size < 4:
        return x.copy()
    b, a = butter(order, [low, high], btype="band")
    # filtfilt keeps peak positions in place; pad length is limited for short windows
    padlen = min(3 * max(len(a), len(b)), x.size - 1)
    return filtfilt(b, a, x, padlen=padlen)


def filter_signal(
    raw: np.ndarray,
    fs: float,
    cfg: Optional[FilterConfig] = None,
) -> np.ndarray:
    """Remove DC and isolate the heart-rate band; output length equals input."""
    cfg = cfg or FilterConfig()
    x = remove_dc(_check(raw, fs))
    if cfg.kind == "butterworth":
        return bandpass(x, fs, cfg.f_low, cfg.f_high, cfg.butter_order)
    if cfg.kind != "moving_average":
        raise ValueError(f"unknown filter kind: {cfg.kind!r}")
    return moving_average_bandpass(x, fs, cfg.f_low, cfg.f_high)
