"""Spectral signal-quality diagnostics.

The pulse SNR compares the energy around the strongest in-band rhythm with
the energy in the rest of the pulse band. Adding noise to a fixed pulse only
moves energy out of the peak bins, so the ratio falls as noise grows; the
estimator uses it as a ceiling on confidence.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from scipy.signal import get_window

SNR_LIMIT_DB = 60.0


def magnitude_spectrum(x: np.ndarray, fs: float) -> Tuple[np.ndarray, np.ndarray]:
    """Hann-windowed one-sided magnitude spectrum. Returns (freqs, mag).

    The window is the periodic (DFT-even) Hann, so a tone that completes a
    whole number of cycles leaks only into its two neighbouring bins.
    """
    x = np.asarray(x, dtype=np.float64)
    w = get_window("hann", x.size)
    mag = np.abs(np.fft.rfft((x - x.mean()) * w))
    freqs = np.fft.rfftfreq(x.size, d=1.0 / fs)
    return freqs, mag


def pulse_snr_db(
    x: np.ndarray,
    fs: float,
    fmin: float = 0.5,
    fmax: float = 4.0,
    peak_bins: int = 1,
) -> Optional[float]:
    """SNR (dB) of the dominant rhythm within [fmin, fmax].

    Signal is the energy of the strongest in-band bin and ``peak_bins`` bins
    on each side; noise is the energy of the remaining in-band bins. The
    result is clamped to +/-60 dB. Returns ``None`` when the band holds fewer
    than four bins or no energy at all.
    """
    freqs, mag = magnitude_spectrum(x, fs)
    band = (freqs >= fmin) & (freqs <= fmax)
    if np.count_nonzero(band) < 4:
        return None
    power = mag[band] ** 2
    total = float(np.sum(power))
    if total <= 0.0:
        return None
    k = int(np.argmax(power))
    lo = max(0, k - int(peak_bins))
    hi = min(power.size, k + int(peak_bins) + 1)
    signal = float(np.sum(power[lo:hi]))
    noise = total - signal
    if noise <= 0.0:
        return SNR_LIMIT_DB
    snr = 10.0 * float(np.log10(signal / noise))
    return round(float(np.clip(snr, -SNR_LIMIT_DB, SNR_LIMIT_DB)), 2)


def perfusion_index(raw: np.ndarray) -> Optional[float]:
    """AC/DC ratio of the raw signal in percent, clamped to 0.1..5.

    ``None`` when the signal has no DC level to normalise by.
    """
    x = np.asarray(raw, dtype=np.float64)
    dc = float(np.mean(x))
    if dc == 0.0:
        return None
    ac = float(np.mean(np.abs(x - dc)))
    return round(float(np.clip(ac / abs(dc) * 100.0, 0.1, 5.0)), 2)
