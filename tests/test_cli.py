from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from ppgvitals.cli import build_parser, main, run_scan, scan_timeout_sec
from ppgvitals.models import VitalsError


def test_simulated_scan_prints_reading(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["--simulate", "--duration", "10", "--logs-dir", str(tmp_path / "logs")])
    out = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert 68 <= out["heart_rate_bpm"] <= 76
    assert out["method"] == "camera"
    assert out["assessment"]["status"] == "healthy"


def test_simulated_out_of_range_reports_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(
        ["--simulate", "--method", "microphone", "--bpm", "20", "--duration", "10",
         "--logs-dir", str(tmp_path / "logs")]
    )
    out = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert out["error"] in ("insufficient_beats", "out_of_physiological_range", "irregular_rhythm")


def test_live_capture_requires_camera(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["--method", "accelerometer", "--logs-dir", str(tmp_path / "logs")])


def test_parser_defaults() -> None:
    args = build_parser().parse_args([])
    assert args.method == "camera"
    assert not args.simulate
    assert args.duration == 15.0


class _FakeCapture:
    """Serves the same BGR frame until ``frames`` run out."""

    def __init__(self, bgr: tuple[int, int, int], frames: int = 10_000) -> None:
        self.bgr = bgr
        self.left = frames
        self.reads = 0
        self.released = False

    def read(self):
        if self.left == 0:
            return False, None
        self.left -= 1
        self.reads += 1
        return True, np.full((8, 8, 3), self.bgr, dtype=np.uint8)

    def release(self) -> None:
        self.released = True


def test_uncovered_lens_times_out() -> None:
    args = build_parser().parse_args(["--duration", "2", "--timeout", "3"])
    fake = _FakeCapture((10, 10, 10))
    res = run_scan(args, cap=fake)
    assert res.error is VitalsError.INSUFFICIENT_SAMPLES
    assert fake.reads == 90
    assert fake.released


def test_default_timeout_is_grace_plus_twice_duration() -> None:
    args = build_parser().parse_args(["--duration", "2"])
    assert scan_timeout_sec(args, grace_sec=1.0) == 5.0
    fake = _FakeCapture((10, 10, 10))
    run_scan(args, cap=fake)
    assert fake.reads == 150


def test_covered_lens_stops_when_buffer_is_full() -> None:
    args = build_parser().parse_args(["--duration", "4", "--timeout", "10"])
    fake = _FakeCapture((50, 60, 180))  # BGR of a lit fingertip
    res = run_scan(args, cap=fake)
    # contact from frame 29 (end of the 30-frame grace window), then 120 measured frames
    assert fake.reads == 149
    assert res.error is VitalsError.INSUFFICIENT_BEATS
