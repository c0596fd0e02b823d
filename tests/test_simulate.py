from __future__ import annotations

import numpy as np
import pytest

from ppgvitals.models import Method
from ppgvitals.simulate import SimulatedSampleSource, SimulationConfig, pulse_train


def test_pulse_train_length_and_seeded_noise() -> None:
    cfg = SimulationConfig(duration_sec=5.0, noise_std=0.3, seed=7)
    a = pulse_train(cfg)
    assert a.size == 150
    assert np.array_equal(a, pulse_train(cfg))


def test_missed_beats_need_gaussian_shape() -> None:
    with pytest.raises(ValueError):
        pulse_train(SimulationConfig(missed_beats=(2,)))
    with pytest.raises(ValueError):
        pulse_train(SimulationConfig(shape="square"))


def test_gaussian_missed_beat_removes_pulse() -> None:
    full = pulse_train(SimulationConfig(shape="gaussian", bpm=60.0))
    gap = pulse_train(SimulationConfig(shape="gaussian", bpm=60.0, missed_beats=(3,)))
    # beat 3 is centred at 3.5 s
    assert full[105] > 0.9
    assert gap[105] < 1e-3


def test_source_shapes_per_method() -> None:
    cam = list(SimulatedSampleSource(Method.CAMERA, SimulationConfig(duration_sec=1.0)).samples())
    assert len(cam) == 30
    assert len(cam[0][0]) == 3
    acc = list(SimulatedSampleSource("accelerometer", SimulationConfig(duration_sec=1.0)).samples())
    assert acc[0] == (9.81, 0.0)
