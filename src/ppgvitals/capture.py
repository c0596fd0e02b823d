"""Camera sample source (OpenCV-based).

Reads frames from a camera with a fingertip pressed on the lens and reduces
each frame to the mean RGB of a central region of interest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Iterator, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def central_roi_mean_rgb(
    frame_bgr: np.ndarray,
    fraction: float = 0.5,
) -> Tuple[float, float, float]:
    """Mean RGB over a centred rectangle covering ``fraction`` of each side.

    Args:
        frame_bgr: HxWx3 uint8 or float array in BGR order.
        fraction: ROI side length relative to the frame (0 < fraction <= 1).

    Returns:
        (R, G, B) means as floats.
    """
    if frame_bgr.ndim != 3 or frame_bgr.shape[2] != 3:
        raise ValueError("frame_bgr must be HxWx3 array")
    if not 0.0 < fraction <= 1.0:
        raise ValueError("fraction must be in (0, 1]")
    h, w = frame_bgr.shape[:2]
    rh = max(1, int(round(h * fraction)))
    rw = max(1, int(round(w * fraction)))
    y0 = (h - rh) // 2
    x0 = (w - rw) // 2
    roi = frame_bgr[y0 : y0 + rh, x0 : x0 + rw].astype(np.float64)
    b_mean, g_mean, r_mean = roi.reshape(-1, 3).mean(axis=0)
    return float(r_mean), float(g_mean), float(b_mean)


@dataclass
class CaptureConfig:
    device_index: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30
    roi_fraction: float = 0.5


class CameraSource:
    """Thin wrapper around OpenCV VideoCapture yielding mean-RGB samples.

    Imports cv2 lazily to avoid import-time side effects in non-camera
    contexts. An already-open capture object can be injected as ``cap``.
    """

    def __init__(self, cfg: Optional[CaptureConfig] = None, cap: object = None) -> None:
        self.cfg = cfg or CaptureConfig()
        self._cap = cap

    def open(self) -> None:
        import cv2  # local import

        self._cap = cv2.VideoCapture(self.cfg.device_index)
        if not self._cap.isOpened():  # type: ignore[union-attr]
            raise RuntimeError(f"Failed to open camera {self.cfg.device_index}")
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.cfg.width)  # type: ignore[union-attr]
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.cfg.height)  # type: ignore[union-attr]
        self._cap.set(cv2.CAP_PROP_FPS, self.cfg.fps)  # type: ignore[union-attr]
        logger.info("Camera %d opened", self.cfg.device_index)

    def read(self) -> Tuple[Tuple[float, float, float], float]:
        """Read one frame and return ((R, G, B), timestamp)."""
        if self._cap is None:
            raise RuntimeError("Camera is not opened")
        ts = perf_counter()
        ok, frame = self._cap.read()  # type: ignore[union-attr]
        if not ok:
            raise RuntimeError("Camera read failed")
        return central_roi_mean_rgb(frame, self.cfg.roi_fraction), ts

    def samples(self, max_frames: int) -> Iterator[Tuple[Tuple[float, float, float], float]]:
        for _ in range(int(max_frames)):
            yield self.read()

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()  # type: ignore[union-attr]
            self._cap = None

    def __enter__(self) -> "CameraSource":
        if self._cap is None:
            self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()
