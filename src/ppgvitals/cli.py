"""Command-line scan runner.

Run with: `uv run task run` (camera) or `uv run task simulate`.
"""

from __future__ import annotations

import argparse
import faulthandler
import json
import logging
import math
from pathlib import Path
from typing import Optional, Sequence

from .config import load_config
from .interpret import interpret_reading
from .models import Method, ScanResult
from .session import AcquisitionSession
from .simulate import SimulatedSampleSource, SimulationConfig

logger = logging.getLogger("ppgvitals")


def _setup_logging(level: str, logs_dir: Path) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    file_error: Optional[OSError] = None
    try:
        logs_dir.mkdir(exist_ok=True)
        handlers.append(logging.FileHandler(logs_dir / "scan.log", encoding="utf-8"))
        faulthandler.enable((logs_dir / "faulthandler.log").open("w"))
    except OSError as exc:
        file_error = exc
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
    )
    if file_error is not None:
        logger.warning("File logging disabled: %s", file_error)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ppgvitals", description="Heart-rate scan")
    p.add_argument("--method", choices=[m.value for m in Method], default="camera")
    p.add_argument("--simulate", action="store_true", help="use synthetic samples")
    p.add_argument("--bpm", type=float, default=72.0, help="simulated heart rate")
    p.add_argument("--noise", type=float, default=0.0, help="simulated noise std")
    p.add_argument("--duration", type=float, default=15.0, help="scan length [s]")
    p.add_argument("--fps", type=float, default=30.0, help="sample rate [Hz]")
    p.add_argument("--device", type=int, default=0, help="camera index")
    p.add_argument("--timeout", type=float, default=None, help="live scan limit [s]")
    p.add_argument("--config", type=Path, default=None, help="JSON overrides file")
    p.add_argument("--log-level", default="INFO")
    p.add_argument("--logs-dir", type=Path, default=Path("logs"))
    return p


def scan_timeout_sec(args: argparse.Namespace, grace_sec: float) -> float:
    """Live scan budget in seconds: ``--timeout`` or grace + 2 x duration.

    The budget is enforced as a frame count at the nominal frame rate.
    """
    if args.timeout is not None:
        return float(args.timeout)
    return grace_sec + 2.0 * args.duration


def run_scan(args: argparse.Namespace, cap: object = None) -> ScanResult:
    """Run one scan; ``cap`` injects an already-open capture object."""
    cfg = load_config(args.config)
    method = Method(args.method)
    session = AcquisitionSession(method, args.fps, args.duration, cfg)
    if args.simulate:
        logger.info("Using SIMULATED samples (%.0f BPM)", args.bpm)
        sim = SimulatedSampleSource(
            method,
            SimulationConfig(
                bpm=args.bpm,
                fs=args.fps,
                duration_sec=args.duration + cfg.session.grace_sec,
                noise_std=args.noise,
            ),
        )
        sim.feed(session)
        return session.finalize()
    if method is not Method.CAMERA:
        raise SystemExit(f"live capture is only available for the camera, not {method.value}")

    from .capture import CameraSource, CaptureConfig

    max_frames = int(math.ceil(scan_timeout_sec(args, cfg.session.grace_sec) * args.fps))
    last_hint = None
    cam_cfg = CaptureConfig(device_index=args.device, fps=int(args.fps))
    with CameraSource(cam_cfg, cap=cap) as cam:
        for rgb, ts in cam.samples(max_frames):
            session.push(rgb, ts)
            hint = session.guidance
            if hint is not last_hint:
                logger.info("%s", hint.message)
                last_hint = hint
            if session.is_complete:
                break
        else:
            logger.warning("Scan timed out after %d frames (%s)", max_frames, session.state.value)
    return session.finalize()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level, args.logs_dir)
    result = run_scan(args)
    if result.ok:
        out = result.reading.to_dict()
        assessment = interpret_reading(result.reading)
        out["assessment"] = {
            "status": assessment.status.value,
            "urgency": assessment.urgency.value,
            "recommendation": assessment.recommendation,
        }
        print(json.dumps(out, ensure_ascii=False, indent=2))
        return 0
    print(json.dumps({"error": result.error.value, "detail": result.detail}, indent=2))
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
