from __future__ import annotations

import numpy as np
import pytest

from ppgvitals.config import FilterConfig
from ppgvitals.preprocess import (
    bandpass,
    filter_signal,
    moving_average,
    remove_dc,
    window_half_widths,
)


def test_remove_dc_zero_mean() -> None:
    x = np.array([1.0, 2.0, 3.0, 6.0])
    y = remove_dc(x)
    assert abs(float(np.mean(y))) < 1e-12
    assert np.allclose(y, [-2.0, -1.0, 0.0, 3.0])


def test_moving_average_constant_signal() -> None:
    x = np.full(100, 4.0)
    y = moving_average(x, half_width=5)
    assert y.shape == x.shape
    assert np.allclose(y, 4.0)


def test_moving_average_shrinks_at_edges() -> None:
    x = np.array([0.0, 0.0, 0.0, 0.0, 10.0])
    y = moving_average(x, half_width=1)
    assert y[0] == 0.0
    assert np.isclose(y[3], 10.0 / 3.0)
    # last sample averages only itself and its left neighbour
    assert np.isclose(y[4], 5.0)


def test_window_half_widths_at_30hz() -> None:
    assert window_half_widths(30.0, 0.5, 4.0) == (3, 30)


def test_filter_removes_drift_and_keeps_pulse() -> None:
    fs = 30.0
    t = np.arange(0, 12.0, 1 / fs)
    pulse = np.sin(2 * np.pi * 1.2 * t)
    x = 100.0 + pulse + 2.0 * t + 0.3 * np.sin(2 * np.pi * 10.0 * t)
    y = filter_signal(x, fs)
    assert y.shape == x.shape
    inner = slice(40, -40)
    corr = np.corrcoef(y[inner], pulse[inner])[0, 1]
    assert corr > 0.9


def test_filter_is_deterministic() -> None:
    x = np.random.RandomState(3).randn(300)
    assert np.array_equal(filter_signal(x, 30.0), filter_signal(x, 30.0))


def test_butterworth_preserves_inband_and_attenuates_outband() -> None:
    fs = 30.0
    t = np.arange(0, 10.0, 1 / fs)
    x = np.sin(2 * np.pi * 1.2 * t) + 0.3 * np.sin(2 * np.pi * 0.2 * t)
    y = bandpass(x, fs=fs, fmin=0.5, fmax=4.0)
    corr = np.corrcoef(y, np.sin(2 * np.pi * 1.2 * t))[0, 1]
    assert corr > 0.7
    y2 = filter_signal(x, fs, FilterConfig(kind="butterworth"))
    assert y2.shape == x.shape


def test_filter_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        filter_signal(np.zeros(0), 30.0)
    with pytest.raises(ValueError):
        filter_signal(np.ones(10), 0.0)
    with pytest.raises(ValueError):
        filter_signal(np.ones(10), 30.0, FilterConfig(kind="median"))
