"""Synthetic sample source for demos and tests.

SIMULATED DATA. Nothing here is ever substituted for a real sensor by the
engine; callers opt in explicitly (for example ``ppgvitals --simulate``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from .models import Method, SampleValue

_DEFAULT_OFFSET = {
    Method.MICROPHONE: 70.0,  # low-frequency spectrum level
    Method.ACCELEROMETER: 9.81,  # gravity, m/s^2
}


@dataclass
class SimulationConfig:
    bpm: float = 72.0
    fs: float = 30.0  # Hz
    duration_sec: float = 10.0
    shape: str = "sine"  # sine | gaussian
    amplitude: float = 1.0
    pulse_width_sec: float = 0.06  # gaussian shape only
    noise_std: float = 0.0
    missed_beats: Tuple[int, ...] = ()  # beat numbers to drop (gaussian shape only)
    seed: int = 0
    base_rgb: Tuple[float, float, float] = (180.0, 60.0, 50.0)
    rgb_gain: Tuple[float, float, float] = (1.0, 1.0, 0.25)  # AC swing, about 1-2% of DC
    offset: Optional[float] = None  # scalar methods; defaults per method


def pulse_train(cfg: SimulationConfig) -> np.ndarray:
    """Unit-free pulse waveform at ``cfg.bpm`` with optional Gaussian noise."""
    n = int(round(cfg.duration_sec * cfg.fs))
    t = np.arange(n) / cfg.fs
    f = cfg.bpm / 60.0
    if cfg.shape == "sine":
        if cfg.missed_beats:
            raise ValueError("missed_beats requires the gaussian shape")
        x = cfg.amplitude * np.sin(2 * np.pi * f * t)
    elif cfg.shape == "gaussian":
        period = 1.0 / f
        x = np.zeros(n)
        k = 0
        while True:
            centre = 0.5 * period + k * period
            if centre > t[-1] + period:
                break
            if k not in cfg.missed_beats:
                x += np.exp(-0.5 * ((t - centre) / cfg.pulse_width_sec) ** 2)
            k += 1
        x *= cfg.amplitude
    else:
        raise ValueError(f"unknown shape: {cfg.shape!r}")
    if cfg.noise_std > 0:
        x = x + cfg.noise_std * np.random.RandomState(cfg.seed).randn(n)
    return x


class SimulatedSampleSource:
    """Yields ``(value, timestamp)`` pairs shaped like a real source.

    Camera samples are mean (R, G, B) frames of a fingertip over a lit lens;
    the other methods yield scalar amplitudes around a per-method offset.
    """

    def __init__(self, method: Method | str, cfg: Optional[SimulationConfig] = None) -> None:
        self.method = Method(method)
        self.cfg = cfg or SimulationConfig()

    def samples(self) -> Iterator[Tuple[SampleValue, float]]:
        c = self.cfg
        x = pulse_train(c)
        for i, v in enumerate(x):
            ts = i / c.fs
            if self.method is Method.CAMERA:
                rgb = tuple(float(b + g * v) for b, g in zip(c.base_rgb, c.rgb_gain))
                yield rgb, ts  # type: ignore[misc]
            else:
                off = c.offset if c.offset is not None else _DEFAULT_OFFSET[self.method]
                yield float(off + v), ts

    def feed(self, session) -> int:
        """Push every sample into ``session``; returns the number pushed."""
        n = 0
        for value, ts in self.samples():
            session.push(value, ts)
            n += 1
        return n
