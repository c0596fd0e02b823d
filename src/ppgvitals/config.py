"""Tunable engine parameters.

Every threshold used by the engine lives here with its unit, so that the
contact gate, filter, peak detector, interval validator and estimator can be
adjusted (and tested) independently. Overrides can be loaded from JSON and are
validated with pydantic before being applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator


@dataclass
class CameraContactConfig:
    brightness_min: float = 50.0  # mean RGB, 0..255
    brightness_max: float = 230.0
    brightness_ideal: float = 120.0
    brightness_half_width: float = 80.0  # distance from ideal that scores 0
    red_ratio_min: float = 1.2  # R / (G + B + 1)
    red_ratio_ceiling: float = 2.0
    saturation_min: float = 30.0  # max(R,G,B) - min(R,G,B)
    stability_scale: float = 20.0  # brightness jump that scores 0
    baseline_alpha: float = 0.1  # EMA weight of the newest frame
    w_brightness: float = 0.40
    w_red: float = 0.35
    w_stability: float = 0.25
    signal_channel: int = 1  # 0=R, 1=G, 2=B; green tracks blood volume best


@dataclass
class AmplitudeContactConfig:
    rms_floor: float = 50.0  # amplitude units of the source
    rms_ceiling: float = 83.3
    window: int = 3  # trailing samples in the RMS window
    detrend: bool = False  # RMS about the running baseline instead of zero
    baseline_alpha: float = 0.05


def _accelerometer_contact() -> AmplitudeContactConfig:
    # Accelerometer magnitude rides on gravity; only the residual is pulse.
    return AmplitudeContactConfig(
        rms_floor=0.005, rms_ceiling=0.05, window=3, detrend=True, baseline_alpha=0.05
    )


@dataclass
class FilterConfig:
    kind: str = "moving_average"  # moving_average | butterworth
    f_low: float = 0.5  # Hz (30 BPM)
    f_high: float = 4.0  # Hz (240 BPM)
    butter_order: int = 3


@dataclass
class PeakConfig:
    threshold_k: float = 0.5  # threshold = mean + k * std
    max_bpm: float = 220.0  # sets the refractory distance
    local_radius: int = 2  # neighbours on each side in the local-max test
    flat_std: float = 1e-9  # below this the window is treated as flat


@dataclass
class IntervalConfig:
    min_peaks: int = 4
    outlier_fraction: float = 0.30  # keep |interval - median| < fraction * median
    min_valid_intervals: int = 3


@dataclass
class EstimatorConfig:
    min_bpm: int = 30
    max_bpm: int = 220
    w_consistency: float = 0.40
    w_coupling: float = 0.35
    w_yield: float = 0.25
    max_confidence: int = 99
    full_confidence_intervals: int = 8  # fewer valid intervals cap confidence linearly
    snr_zero_db: float = 0.0  # pulse SNR at which the confidence ceiling reaches 0
    snr_full_db: float = 30.0  # pulse SNR at which the ceiling stops binding
    excellent_min: int = 90
    good_min: int = 80
    fair_min: int = 70
    spo2_baseline: float = 98.0  # percent
    spo2_cv_scale: float = 100.0  # percent drop per unit coefficient of variation
    spo2_min: float = 85.0
    spo2_max: float = 100.0
    hrv_min_intervals: int = 5
    respiration_min_sec: float = 20.0
    rr_min_hz: float = 0.1
    rr_max_hz: float = 0.5


@dataclass
class SessionConfig:
    min_duration_sec: float = 3.0  # shortest scan that may be finalized
    grace_sec: float = 1.0  # contact majority window before measuring starts
    quality_window_sec: float = 1.0  # rolling snapshot history for guidance


@dataclass
class EngineConfig:
    camera: CameraContactConfig = field(default_factory=CameraContactConfig)
    microphone: AmplitudeContactConfig = field(default_factory=AmplitudeContactConfig)
    accelerometer: AmplitudeContactConfig = field(default_factory=_accelerometer_contact)
    filter: FilterConfig = field(default_factory=FilterConfig)
    peaks: PeakConfig = field(default_factory=PeakConfig)
    intervals: IntervalConfig = field(default_factory=IntervalConfig)
    estimator: EstimatorConfig = field(default_factory=EstimatorConfig)
    session: SessionConfig = field(default_factory=SessionConfig)


class CameraContactModel(BaseModel):
    brightness_min: Optional[float] = Field(None, ge=0.0, le=255.0)
    brightness_max: Optional[float] = Field(None, ge=0.0, le=255.0)
    brightness_ideal: Optional[float] = Field(None, ge=0.0, le=255.0)
    brightness_half_width: Optional[float] = Field(None, gt=0.0, le=255.0)
    red_ratio_min: Optional[float] = Field(None, ge=0.0, le=10.0)
    red_ratio_ceiling: Optional[float] = Field(None, gt=0.0, le=10.0)
    saturation_min: Optional[float] = Field(None, ge=0.0, le=255.0)
    stability_scale: Optional[float] = Field(None, gt=0.0, le=255.0)
    baseline_alpha: Optional[float] = Field(None, gt=0.0, le=1.0)
    signal_channel: Optional[int] = Field(None, ge=0, le=2)


class AmplitudeContactModel(BaseModel):
    rms_floor: Optional[float] = Field(None, ge=0.0)
    rms_ceiling: Optional[float] = Field(None, gt=0.0)
    window: Optional[int] = Field(None, ge=1, le=64)
    detrend: Optional[bool] = None
    baseline_alpha: Optional[float] = Field(None, gt=0.0, le=1.0)


class FilterModel(BaseModel):
    kind: Optional[str] = Field(None, pattern=r"^(moving_average|butterworth)$")
    f_low: Optional[float] = Field(None, ge=0.1, le=2.0)
    f_high: Optional[float] = Field(None, ge=1.5, le=8.0)
    butter_order: Optional[int] = Field(None, ge=1, le=8)


class PeakModel(BaseModel):
    threshold_k: Optional[float] = Field(None, ge=0.0, le=3.0)
    max_bpm: Optional[float] = Field(None, ge=120.0, le=300.0)


class IntervalModel(BaseModel):
    min_peaks: Optional[int] = Field(None, ge=2, le=32)
    outlier_fraction: Optional[float] = Field(None, gt=0.0, le=1.0)
    min_valid_intervals: Optional[int] = Field(None, ge=1, le=32)


class EstimatorModel(BaseModel):
    full_confidence_intervals: Optional[int] = Field(None, ge=1, le=64)
    snr_zero_db: Optional[float] = Field(None, ge=-20.0, le=40.0)
    snr_full_db: Optional[float] = Field(None, ge=0.0, le=60.0)
    spo2_baseline: Optional[float] = Field(None, ge=85.0, le=100.0)
    spo2_cv_scale: Optional[float] = Field(None, ge=0.0, le=500.0)
    respiration_min_sec: Optional[float] = Field(None, ge=5.0, le=120.0)


class SessionModel(BaseModel):
    min_duration_sec: Optional[float] = Field(None, ge=1.0, le=60.0)
    grace_sec: Optional[float] = Field(None, ge=0.0, le=10.0)
    quality_window_sec: Optional[float] = Field(None, ge=0.1, le=10.0)


class ConfigOverrides(BaseModel):
    """Validated partial update of an :class:`EngineConfig`."""

    camera: Optional[CameraContactModel] = None
    microphone: Optional[AmplitudeContactModel] = None
    accelerometer: Optional[AmplitudeContactModel] = None
    filter: Optional[FilterModel] = None
    peaks: Optional[PeakModel] = None
    intervals: Optional[IntervalModel] = None
    estimator: Optional[EstimatorModel] = None
    session: Optional[SessionModel] = None

    @model_validator(mode="after")
    def _check_bands(self) -> "ConfigOverrides":
        f = self.filter
        if f is not None and f.f_low is not None and f.f_high is not None:
            if f.f_low >= f.f_high:
                raise ValueError("filter.f_low must be below filter.f_high")
        c = self.camera
        if c is not None and c.brightness_min is not None and c.brightness_max is not None:
            if c.brightness_min >= c.brightness_max:
                raise ValueError("camera.brightness_min must be below camera.brightness_max")
        e = self.estimator
        if e is not None and e.snr_zero_db is not None and e.snr_full_db is not None:
            if e.snr_zero_db >= e.snr_full_db:
                raise ValueError("estimator.snr_zero_db must be below estimator.snr_full_db")
        return self


def apply_overrides(cfg: EngineConfig, overrides: ConfigOverrides) -> EngineConfig:
    """Apply validated overrides in place and return ``cfg``."""
    data = overrides.model_dump(exclude_none=True)
    for section, values in data.items():
        target = getattr(cfg, section)
        for k, v in values.items():
            setattr(target, k, v)
    return cfg


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Return defaults, updated from a JSON overrides file when given."""
    cfg = EngineConfig()
    if path is None:
        return cfg
    overrides = ConfigOverrides.model_validate_json(Path(path).read_text(encoding="utf-8"))
    return apply_overrides(cfg, overrides)
