from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from ppgvitals.config import ConfigOverrides, EngineConfig, apply_overrides, load_config


def test_defaults() -> None:
    cfg = load_config()
    assert cfg.filter.kind == "moving_average"
    assert cfg.intervals.min_peaks == 4
    assert cfg.estimator.max_confidence == 99
    assert cfg.accelerometer.detrend and not cfg.microphone.detrend


def test_load_overrides_from_json(tmp_path: Path) -> None:
    p = tmp_path / "overrides.json"
    p.write_text(
        json.dumps({"filter": {"kind": "butterworth", "f_high": 3.5}, "peaks": {"threshold_k": 0.8}}),
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.filter.kind == "butterworth"
    assert cfg.filter.f_high == 3.5
    assert cfg.filter.f_low == 0.5
    assert cfg.peaks.threshold_k == 0.8


def test_apply_overrides_only_touches_given_fields() -> None:
    cfg = EngineConfig()
    apply_overrides(cfg, ConfigOverrides(session={"grace_sec": 2.0}))
    assert cfg.session.grace_sec == 2.0
    assert cfg.session.min_duration_sec == 3.0


@pytest.mark.parametrize(
    "payload",
    [
        {"filter": {"kind": "fir"}},
        {"filter": {"f_low": 1.8, "f_high": 1.6}},
        {"camera": {"brightness_min": 200.0, "brightness_max": 100.0}},
        {"peaks": {"max_bpm": 50.0}},
        {"estimator": {"snr_zero_db": 20.0, "snr_full_db": 10.0}},
    ],
)
def test_invalid_overrides_are_rejected(payload: dict) -> None:
    with pytest.raises(ValidationError):
        ConfigOverrides.model_validate(payload)
