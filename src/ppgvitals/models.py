"""Value types shared by the engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple, Union

SampleValue = Union[float, Tuple[float, float, float]]


class Method(str, Enum):
    CAMERA = "camera"
    MICROPHONE = "microphone"
    ACCELEROMETER = "accelerometer"


class Quality(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


class VitalsError(str, Enum):
    """Expected, recoverable outcomes of a failed scan."""

    INSUFFICIENT_SAMPLES = "insufficient_samples"
    INSUFFICIENT_BEATS = "insufficient_beats"
    IRREGULAR_RHYTHM = "irregular_rhythm"
    OUT_OF_PHYSIOLOGICAL_RANGE = "out_of_physiological_range"

    @property
    def remediation(self) -> str:
        return _REMEDIATION[self]


_REMEDIATION = {
    VitalsError.INSUFFICIENT_SAMPLES: "Insufficient data. Scan for longer.",
    VitalsError.INSUFFICIENT_BEATS: "Could not detect enough heartbeats. Cover the sensor fully and try again.",
    VitalsError.IRREGULAR_RHYTHM: "Signal too unstable. Try again with a steadier placement.",
    VitalsError.OUT_OF_PHYSIOLOGICAL_RANGE: "Reading outside the physiological range. Try again.",
}


@dataclass(frozen=True)
class Sample:
    value: SampleValue
    timestamp: float  # monotonic seconds
    index: int


@dataclass(frozen=True)
class QualitySnapshot:
    coupling_quality: float  # 0..100
    frame_index: int
    contact: bool
    brightness: Optional[float] = None
    red_ratio: Optional[float] = None
    stability: Optional[float] = None
    rms: Optional[float] = None


@dataclass(frozen=True)
class Peak:
    index: int
    amplitude: float


@dataclass(frozen=True)
class HrvMetrics:
    rmssd_ms: float
    sdnn_ms: float
    irregularity: float  # coefficient of variation of valid intervals


@dataclass(frozen=True)
class VitalsReading:
    """A successful scan.

    ``spo2_pct`` is a single-wavelength heuristic and must be presented as an
    estimate only; it is ``None`` for non-camera methods.
    """

    heart_rate_bpm: int
    confidence_pct: int
    quality: Quality
    method: Method
    sample_count: int
    spo2_pct: Optional[float] = None
    produced_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    snr_db: Optional[float] = None
    hrv: Optional[HrvMetrics] = None
    respiratory_rate_brpm: Optional[float] = None
    perfusion_index: Optional[float] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["quality"] = self.quality.value
        d["method"] = self.method.value
        d["produced_at"] = self.produced_at.isoformat()
        return d


@dataclass(frozen=True)
class ScanResult:
    """Either a reading or a typed failure, never both."""

    reading: Optional[VitalsReading] = None
    error: Optional[VitalsError] = None
    detail: str = ""

    def __post_init__(self) -> None:
        if (self.reading is None) == (self.error is None):
            raise ValueError("ScanResult needs exactly one of reading or error")

    @property
    def ok(self) -> bool:
        return self.reading is not None

    @classmethod
    def failure(cls, error: VitalsError, detail: str = "") -> "ScanResult":
        return cls(error=error, detail=detail or error.remediation)
