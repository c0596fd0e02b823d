"""One scan attempt: buffered samples, live contact quality, finalization.

The session does no I/O and owns no timers. A caller (camera loop, audio
callback, simulator) pushes one sample per acquired unit and decides when to
call :meth:`AcquisitionSession.finalize`. Independent attempts use
independent sessions.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from time import perf_counter
from typing import Deque, Optional, Tuple

import numpy as np

from .config import EngineConfig
from .contact import Guidance, gate_for, guidance
from .models import Method, QualitySnapshot, Sample, SampleValue, ScanResult, VitalsError
from .pipeline import analyze_signal, min_samples

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    POSITIONING = "positioning"
    MEASURING = "measuring"
    FINISHED = "finished"


class AcquisitionSession:
    """Bounded buffer of samples for a single scan.

    Samples arrive in ``positioning`` state. Once the majority of a trailing
    grace window shows sensor contact the session switches to ``measuring``
    and only samples from then on feed the estimate. Buffer length is
    ``ceil(target_duration_sec * sample_rate_hz)``.
    """

    def __init__(
        self,
        method: Method | str,
        sample_rate_hz: float,
        target_duration_sec: float = 15.0,
        cfg: Optional[EngineConfig] = None,
    ) -> None:
        if not sample_rate_hz > 0:
            raise ValueError("sample_rate_hz must be positive")
        if not target_duration_sec > 0:
            raise ValueError("target_duration_sec must be positive")
        self.cfg = cfg or EngineConfig()
        self.method = Method(method)
        self.sample_rate_hz = float(sample_rate_hz)
        self.target_duration_sec = float(target_duration_sec)
        self.started_at = datetime.now(timezone.utc)
        self.capacity = int(math.ceil(self.target_duration_sec * self.sample_rate_hz))
        self.state = SessionState.POSITIONING

        scfg = self.cfg.session
        self._grace_len = max(1, int(round(scfg.grace_sec * self.sample_rate_hz)))
        history_len = max(1, int(round(scfg.quality_window_sec * self.sample_rate_hz)))
        self._gate = gate_for(self.method, self.cfg)
        self._samples: Deque[Sample] = deque(maxlen=self.capacity)
        self._measured_quality: Deque[QualitySnapshot] = deque(maxlen=self.capacity)
        self._recent: Deque[SampleValue] = deque(maxlen=64)
        self._contact: Deque[bool] = deque(maxlen=self._grace_len)
        self._history: Deque[QualitySnapshot] = deque(maxlen=history_len)
        self._measure_start: Optional[int] = None
        self._next_index = 0
        self._last_ts: Optional[float] = None

    def _coerce(self, value: SampleValue) -> SampleValue:
        if self.method is Method.CAMERA:
            rgb = tuple(float(v) for v in np.asarray(value, dtype=np.float64).reshape(-1))
            if len(rgb) != 3:
                raise ValueError("camera sessions take (R, G, B) samples")
            return rgb  # type: ignore[return-value]
        if np.ndim(value) != 0:
            raise ValueError(f"{self.method.value} sessions take scalar samples")
        return float(value)  # type: ignore[arg-type]

    def push(self, value: SampleValue, timestamp: Optional[float] = None) -> QualitySnapshot:
        """Append one sample and return its contact-quality snapshot.

        Args:
            value: mean (R, G, B) for the camera, amplitude otherwise.
            timestamp: monotonic seconds; defaults to ``perf_counter()``.
                Must be strictly increasing within the session.
        """
        if self.state is SessionState.FINISHED:
            raise RuntimeError("session is finished")
        ts = perf_counter() if timestamp is None else float(timestamp)
        if self._last_ts is not None and ts <= self._last_ts:
            raise ValueError(f"timestamp {ts} does not advance past {self._last_ts}")
        value = self._coerce(value)
        idx = self._next_index
        self._next_index += 1
        self._last_ts = ts
        self._samples.append(Sample(value=value, timestamp=ts, index=idx))
        self._recent.append(value)

        snap = self._gate.evaluate(self._recent, frame_index=idx)
        self._contact.append(snap.contact)
        self._history.append(snap)
        if self.state is SessionState.POSITIONING:
            full = len(self._contact) == self._grace_len
            if full and sum(self._contact) * 2 > self._grace_len:
                self.state = SessionState.MEASURING
                self._measure_start = idx
                logger.info("Contact established at sample %d, measuring", idx)
        if self.state is SessionState.MEASURING:
            self._measured_quality.append(snap)
        return snap

    @property
    def latest_quality(self) -> Optional[QualitySnapshot]:
        return self._history[-1] if self._history else None

    @property
    def quality_history(self) -> Tuple[QualitySnapshot, ...]:
        return tuple(self._history)

    @property
    def guidance(self) -> Guidance:
        return guidance(self._history)

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def measured_count(self) -> int:
        if self._measure_start is None:
            return 0
        return sum(1 for s in self._samples if s.index >= self._measure_start)

    @property
    def progress(self) -> float:
        return min(1.0, self.measured_count / float(self.capacity))

    @property
    def is_complete(self) -> bool:
        return self.measured_count >= self.capacity

    def _signal(self) -> np.ndarray:
        start = self._measure_start
        if start is None:
            return np.zeros(0, dtype=np.float64)
        ch = self.cfg.camera.signal_channel
        if self.method is Method.CAMERA:
            vals = [s.value[ch] for s in self._samples if s.index >= start]  # type: ignore[index]
        else:
            vals = [s.value for s in self._samples if s.index >= start]
        return np.asarray(vals, dtype=np.float64)

    def _analyze(self) -> ScanResult:
        x = self._signal()
        need = min_samples(self.sample_rate_hz, self.cfg)
        if x.size < need:
            if self._measure_start is None:
                detail = "No stable sensor contact. Cover the sensor fully and try again."
            else:
                detail = f"Collected {x.size} samples, need at least {need}. Scan for longer."
            return ScanResult.failure(VitalsError.INSUFFICIENT_SAMPLES, detail)
        return analyze_signal(
            x,
            self.sample_rate_hz,
            tuple(self._measured_quality),
            method=self.method,
            cfg=self.cfg,
        )

    def preview(self) -> ScanResult:
        """Estimate over the samples so far without ending the session."""
        if self.state is SessionState.FINISHED:
            raise RuntimeError("session is finished")
        return self._analyze()

    def finalize(self) -> ScanResult:
        """End the session and return a reading or a typed failure."""
        if self.state is SessionState.FINISHED:
            raise RuntimeError("session already finalized")
        result = self._analyze()
        self.state = SessionState.FINISHED
        if result.ok:
            r = result.reading
            logger.info(
                "Scan finished: %d BPM, %d%% confidence (%s)",
                r.heart_rate_bpm,
                r.confidence_pct,
                r.quality.value,
            )
        else:
            logger.info("Scan failed: %s", result.error.value)
        self._release()
        return result

    def cancel(self) -> None:
        """Abort the scan and drop buffered samples."""
        self.state = SessionState.FINISHED
        self._release()

    def _release(self) -> None:
        self._samples.clear()
        self._measured_quality.clear()
        self._recent.clear()
        self._contact.clear()
