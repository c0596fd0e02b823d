from __future__ import annotations

import pytest

from ppgvitals.interpret import (
    RiskLevel,
    Status,
    Urgency,
    interpret_heart_rate,
    interpret_reading,
    interpret_spo2,
    interpret_temperature,
    overall_assessment,
)
from ppgvitals.models import Method, Quality, VitalsReading


@pytest.mark.parametrize(
    "bpm,level",
    [
        (35, RiskLevel.CRITICAL),
        (45, RiskLevel.CONCERNING),
        (55, RiskLevel.MONITOR),
        (72, RiskLevel.NORMAL),
        (100, RiskLevel.NORMAL),
        (110, RiskLevel.MONITOR),
        (140, RiskLevel.CONCERNING),
        (180, RiskLevel.CRITICAL),
    ],
)
def test_heart_rate_bands(bpm: int, level: RiskLevel) -> None:
    assert interpret_heart_rate(bpm).risk_level is level


def test_spo2_and_temperature_bands() -> None:
    assert interpret_spo2(97).risk_level is RiskLevel.NORMAL
    assert interpret_spo2(92).risk_level is RiskLevel.MONITOR
    assert interpret_spo2(86).risk_level is RiskLevel.CONCERNING
    assert interpret_spo2(80).risk_level is RiskLevel.CRITICAL
    assert interpret_temperature(34.0).risk_level is RiskLevel.CRITICAL
    assert interpret_temperature(36.8).risk_level is RiskLevel.NORMAL
    assert interpret_temperature(38.0).risk_level is RiskLevel.MONITOR
    assert interpret_temperature(39.5).risk_level is RiskLevel.CONCERNING
    assert interpret_temperature(41.0).risk_level is RiskLevel.CRITICAL


def test_overall_assessment_escalation() -> None:
    normal = interpret_heart_rate(72)
    monitor = interpret_heart_rate(110)
    concerning = interpret_heart_rate(45)
    critical = interpret_spo2(80)

    assert overall_assessment([normal]).status is Status.HEALTHY
    assert overall_assessment([normal, monitor]).status is Status.MONITOR
    one = overall_assessment([normal, concerning])
    assert (one.status, one.urgency) == (Status.SEEK_CARE, Urgency.ROUTINE)
    two = overall_assessment([concerning, interpret_spo2(86)])
    assert (two.status, two.urgency) == (Status.SEEK_CARE, Urgency.URGENT)
    crit = overall_assessment([normal, concerning, critical])
    assert (crit.status, crit.urgency) == (Status.EMERGENCY, Urgency.IMMEDIATE)


def test_interpret_reading_uses_available_parts() -> None:
    r = VitalsReading(
        heart_rate_bpm=72,
        confidence_pct=92,
        quality=Quality.EXCELLENT,
        method=Method.CAMERA,
        sample_count=300,
        spo2_pct=97.0,
    )
    a = interpret_reading(r)
    assert a.status is Status.HEALTHY
    assert len(a.parts) == 2
    assert len(interpret_reading(r, temperature_c=39.0).parts) == 3
    assert interpret_reading(r, temperature_c=39.0).status is Status.SEEK_CARE
