from __future__ import annotations

import numpy as np

from ppgvitals.quality import SNR_LIMIT_DB, magnitude_spectrum, perfusion_index, pulse_snr_db

FS = 30.0
T = np.arange(300) / FS


def test_magnitude_spectrum_peak_frequency() -> None:
    freqs, mag = magnitude_spectrum(np.sin(2 * np.pi * 1.5 * T), FS)
    assert abs(freqs[int(np.argmax(mag))] - 1.5) < 1e-9


def test_on_bin_tone_stays_in_peak_bins() -> None:
    # periodic window: a whole number of cycles leaks into neighbours only
    _, mag = magnitude_spectrum(np.sin(2 * np.pi * 1.2 * T), FS)
    assert mag[12] > 0.0
    assert np.all(mag[:10] < 1e-9)
    assert np.all(mag[15:] < 1e-9)
    assert pulse_snr_db(np.sin(2 * np.pi * 1.2 * T), FS) == SNR_LIMIT_DB


def test_pulse_snr_rhythm_beats_noise() -> None:
    noise = np.random.RandomState(0).randn(300)
    pulse = np.sin(2 * np.pi * 1.2 * T) + 0.1 * noise
    assert pulse_snr_db(pulse, FS) > pulse_snr_db(noise, FS)
    assert pulse_snr_db(pulse, FS) > 10.0


def test_pulse_snr_falls_as_noise_scales() -> None:
    noise = np.random.RandomState(3).randn(300)
    pulse = np.sin(2 * np.pi * 1.2 * T)
    snrs = [pulse_snr_db(pulse + s * noise, FS) for s in (0.1, 0.3, 0.6, 1.0)]
    assert snrs == sorted(snrs, reverse=True)
    assert len(set(snrs)) == len(snrs)


def test_pulse_snr_degenerate_input() -> None:
    assert pulse_snr_db(np.zeros(300), FS) is None
    assert pulse_snr_db(np.ones(8), FS) is None


def test_perfusion_index() -> None:
    raw = 100.0 + np.sin(2 * np.pi * 1.2 * T)
    pi = perfusion_index(raw)
    # mean |sin| = 2 / pi
    assert abs(pi - 0.64) < 0.02
    assert perfusion_index(np.full(10, 50.0)) == 0.1
    assert perfusion_index(np.zeros(10)) is None
