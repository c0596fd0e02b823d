"""Sensor coupling (contact) quality.

The camera gate scores how well a fingertip covers the lens from the mean
RGB of each frame; the amplitude gate scores microphone/accelerometer
coupling from a short windowed RMS. Both keep only a running baseline and a
frame counter, so evaluation is O(1) per sample.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np

from .config import AmplitudeContactConfig, CameraContactConfig, EngineConfig
from .models import Method, QualitySnapshot, SampleValue


def _clip01(x: float) -> float:
    return float(np.clip(x, 0.0, 1.0))


class CameraContactGate:
    """Finger-on-lens detector for mean RGB frames."""

    def __init__(self, cfg: Optional[CameraContactConfig] = None) -> None:
        self.cfg = cfg or CameraContactConfig()
        self._baseline: Optional[float] = None
        self._frames = 0

    def reset(self) -> None:
        self._baseline = None
        self._frames = 0

    def evaluate(
        self,
        window: Sequence[SampleValue],
        frame_index: Optional[int] = None,
    ) -> QualitySnapshot:
        """Score the newest frame of ``window``.

        Args:
            window: trailing mean (R, G, B) frames, newest last.
            frame_index: index to stamp on the snapshot; defaults to an
                internal frame counter.
        """
        if len(window) == 0:
            raise ValueError("window must contain at least one frame")
        rgb = np.asarray(window[-1], dtype=np.float64)
        if rgb.shape != (3,):
            raise ValueError("camera samples must be (R, G, B) triples")
        c = self.cfg
        r, g, b = (float(v) for v in rgb)
        brightness = (r + g + b) / 3.0
        red_ratio = r / (g + b + 1.0)
        saturation = float(rgb.max() - rgb.min())

        if self._baseline is None:
            self._baseline = brightness
        stability = _clip01(1.0 - abs(brightness - self._baseline) / c.stability_scale)
        self._baseline += c.baseline_alpha * (brightness - self._baseline)

        contact = (
            c.brightness_min <= brightness <= c.brightness_max
            and red_ratio > c.red_ratio_min
            and saturation > c.saturation_min
        )
        if contact:
            b_term = _clip01(1.0 - abs(brightness - c.brightness_ideal) / c.brightness_half_width)
            r_term = _clip01(min(red_ratio, c.red_ratio_ceiling) / c.red_ratio_ceiling)
            score = 100.0 * (
                c.w_brightness * b_term + c.w_red * r_term + c.w_stability * stability
            )
        else:
            score = 0.0

        idx = self._frames if frame_index is None else int(frame_index)
        self._frames += 1
        return QualitySnapshot(
            coupling_quality=float(np.clip(score, 0.0, 100.0)),
            frame_index=idx,
            contact=bool(contact),
            brightness=brightness,
            red_ratio=red_ratio,
            stability=stability,
        )


class AmplitudeContactGate:
    """Coupling score for microphone / accelerometer amplitude ticks."""

    def __init__(self, cfg: Optional[AmplitudeContactConfig] = None) -> None:
        self.cfg = cfg or AmplitudeContactConfig()
        self._baseline: Optional[float] = None
        self._frames = 0

    def reset(self) -> None:
        self._baseline = None
        self._frames = 0

    def evaluate(
        self,
        window: Sequence[SampleValue],
        frame_index: Optional[int] = None,
    ) -> QualitySnapshot:
        if len(window) == 0:
            raise ValueError("window must contain at least one sample")
        c = self.cfg
        x = np.asarray(list(window)[-c.window :], dtype=np.float64)
        if x.ndim != 1:
            raise ValueError("amplitude samples must be scalars")
        newest = float(x[-1])
        if self._baseline is None:
            self._baseline = newest
        if c.detrend:
            x = x - self._baseline
        self._baseline += c.baseline_alpha * (newest - self._baseline)
        rms = float(np.sqrt(np.mean(x * x)))
        span = max(1e-12, c.rms_ceiling - c.rms_floor)
        score = 100.0 * _clip01((rms - c.rms_floor) / span)

        idx = self._frames if frame_index is None else int(frame_index)
        self._frames += 1
        return QualitySnapshot(
            coupling_quality=score,
            frame_index=idx,
            contact=rms >= c.rms_floor,
            rms=rms,
        )


ContactGate = Union[CameraContactGate, AmplitudeContactGate]


def gate_for(method: Method, cfg: Optional[EngineConfig] = None) -> ContactGate:
    """Build the contact gate matching an acquisition method."""
    cfg = cfg or EngineConfig()
    if method is Method.CAMERA:
        return CameraContactGate(cfg.camera)
    if method is Method.MICROPHONE:
        return AmplitudeContactGate(cfg.microphone)
    return AmplitudeContactGate(cfg.accelerometer)


class Guidance(str, Enum):
    COVER_SENSOR = "cover_sensor"
    HOLD_STEADY = "hold_steady"
    OPTIMIZING = "optimizing"
    MEASURING = "measuring"
    EXCELLENT = "excellent"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    Guidance.COVER_SENSOR: "Cover the sensor completely",
    Guidance.HOLD_STEADY: "Hold steady",
    Guidance.OPTIMIZING: "Contact detected, optimizing signal",
    Guidance.MEASURING: "Good signal, measuring",
    Guidance.EXCELLENT: "Excellent signal",
}


def guidance(history: Sequence[QualitySnapshot], steady_min: float = 0.5) -> Guidance:
    """Map a short trailing snapshot history to a positioning hint."""
    if len(history) == 0:
        return Guidance.COVER_SENSOR
    contact_frac = sum(1 for s in history if s.contact) / len(history)
    if contact_frac < 0.5:
        return Guidance.COVER_SENSOR
    stab = [s.stability for s in history if s.stability is not None]
    if stab and float(np.mean(stab)) < steady_min:
        return Guidance.HOLD_STEADY
    q = float(np.mean([s.coupling_quality for s in history]))
    if q < 50.0:
        return Guidance.OPTIMIZING
    if q < 80.0:
        return Guidance.MEASURING
    return Guidance.EXCELLENT
