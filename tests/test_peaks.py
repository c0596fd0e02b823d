from __future__ import annotations

import numpy as np

from ppgvitals.config import PeakConfig
from ppgvitals.peaks import find_peaks, peak_list, refractory_samples


def test_refractory_distance_at_30hz() -> None:
    assert refractory_samples(30.0) == 8
    assert refractory_samples(60.0) == 16


def test_sine_peaks_every_period() -> None:
    fs = 30.0
    t = np.arange(300) / fs
    x = np.sin(2 * np.pi * 1.2 * t)  # 72 BPM -> period of 25 samples
    peaks = find_peaks(x, fs)
    assert np.array_equal(peaks, 6 + 25 * np.arange(12))


def test_constant_and_zero_signals_have_no_peaks() -> None:
    assert find_peaks(np.zeros(300), 30.0).size == 0
    assert find_peaks(np.full(300, 0.1), 30.0).size == 0


def test_candidate_inside_refractory_is_discarded() -> None:
    x = np.zeros(40)
    x[10] = 1.0
    x[15] = 2.0  # taller, but only 5 samples after an accepted peak
    x[30] = 1.5
    peaks = find_peaks(x, 30.0)
    assert peaks.tolist() == [10, 30]


def test_flat_top_keeps_first_index() -> None:
    x = np.zeros(20)
    x[8] = 1.0
    x[9] = 1.0
    assert find_peaks(x, 30.0).tolist() == [8]


def test_threshold_rejects_small_local_maxima() -> None:
    x = np.zeros(60)
    x[10] = 1.0
    x[30] = 0.05  # local max, but under mean + k*std
    x[50] = 1.0
    assert find_peaks(x, 30.0).tolist() == [10, 50]
    # with k=0 everything above the mean counts
    assert find_peaks(x, 30.0, PeakConfig(threshold_k=0.0)).tolist() == [10, 30, 50]


def test_find_peaks_idempotent() -> None:
    x = np.random.RandomState(7).randn(300)
    a = find_peaks(x, 30.0)
    b = find_peaks(x, 30.0)
    assert np.array_equal(a, b)


def test_peak_list_amplitudes() -> None:
    x = np.array([0.0, 0.0, 3.0, 0.0, 0.0])
    peaks = peak_list(x, np.array([2]))
    assert peaks[0].index == 2
    assert peaks[0].amplitude == 3.0
