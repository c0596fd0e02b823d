"""Risk-band lookup for readings (heart rate, SpO2, temperature).

A static threshold table, not a diagnosis. SpO2 from the camera is an
estimate and its interpretation inherits that limitation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .models import VitalsReading


class RiskLevel(str, Enum):
    NORMAL = "normal"
    MONITOR = "monitor"
    CONCERNING = "concerning"
    CRITICAL = "critical"


class Status(str, Enum):
    HEALTHY = "healthy"
    MONITOR = "monitor"
    SEEK_CARE = "seek_care"
    EMERGENCY = "emergency"


class Urgency(str, Enum):
    NONE = "none"
    ROUTINE = "routine"
    URGENT = "urgent"
    IMMEDIATE = "immediate"


@dataclass(frozen=True)
class Interpretation:
    interpretation: str
    risk_level: RiskLevel
    recommendation: str


@dataclass(frozen=True)
class Assessment:
    status: Status
    urgency: Urgency
    recommendation: str
    parts: tuple[Interpretation, ...] = ()


def interpret_heart_rate(bpm: float) -> Interpretation:
    if bpm < 40:
        return Interpretation(
            "Severe bradycardia, dangerously slow heart rate",
            RiskLevel.CRITICAL,
            "Emergency: call emergency services immediately.",
        )
    if bpm < 50:
        return Interpretation(
            "Bradycardia, below normal heart rate",
            RiskLevel.CONCERNING,
            "Seek medical attention. Monitor symptoms closely.",
        )
    if bpm < 60:
        return Interpretation(
            "Low-normal heart rate",
            RiskLevel.MONITOR,
            "Common in athletes and at rest. Monitor if you feel unwell.",
        )
    if bpm <= 100:
        return Interpretation(
            "Normal heart rate",
            RiskLevel.NORMAL,
            "Your heart rate is within healthy limits.",
        )
    if bpm <= 120:
        return Interpretation(
            "Mild tachycardia, slightly elevated",
            RiskLevel.MONITOR,
            "Monitor trends. Rest and avoid caffeine.",
        )
    if bpm <= 150:
        return Interpretation(
            "Tachycardia, significantly elevated heart rate",
            RiskLevel.CONCERNING,
            "Rest immediately. Seek medical evaluation if it persists.",
        )
    return Interpretation(
        "Severe tachycardia, critically high heart rate",
        RiskLevel.CRITICAL,
        "Emergency: call emergency services.",
    )


def interpret_spo2(spo2: float) -> Interpretation:
    if spo2 >= 95:
        return Interpretation(
            "Normal oxygen saturation (estimate)",
            RiskLevel.NORMAL,
            "Estimated blood oxygen is in the healthy range.",
        )
    if spo2 >= 90:
        return Interpretation(
            "Mildly low oxygen saturation (estimate)",
            RiskLevel.MONITOR,
            "Monitor breathing. Confirm with a pulse oximeter.",
        )
    if spo2 >= 85:
        return Interpretation(
            "Low oxygen saturation (estimate)",
            RiskLevel.CONCERNING,
            "Confirm with a pulse oximeter and seek medical attention.",
        )
    return Interpretation(
        "Critically low oxygen saturation (estimate)",
        RiskLevel.CRITICAL,
        "Emergency: call emergency services.",
    )


def interpret_temperature(celsius: float) -> Interpretation:
    if celsius < 35.0:
        return Interpretation(
            "Hypothermia, dangerously low body temperature",
            RiskLevel.CRITICAL,
            "Emergency: call emergency services and seek warming.",
        )
    if celsius <= 37.5:
        return Interpretation(
            "Normal body temperature",
            RiskLevel.NORMAL,
            "Your body temperature is within normal range.",
        )
    if celsius <= 38.5:
        return Interpretation(
            "Low-grade fever",
            RiskLevel.MONITOR,
            "Monitor symptoms. Stay hydrated and rest.",
        )
    if celsius <= 40.0:
        return Interpretation(
            "High fever",
            RiskLevel.CONCERNING,
            "Seek medical care.",
        )
    return Interpretation(
        "Hyperthermia, dangerously high temperature",
        RiskLevel.CRITICAL,
        "Emergency: call emergency services.",
    )


def overall_assessment(parts: Sequence[Interpretation]) -> Assessment:
    levels = [p.risk_level for p in parts]
    critical = levels.count(RiskLevel.CRITICAL)
    concerning = levels.count(RiskLevel.CONCERNING)
    if critical > 0:
        return Assessment(
            Status.EMERGENCY,
            Urgency.IMMEDIATE,
            "Critical vital sign detected. Call emergency services immediately.",
            tuple(parts),
        )
    if concerning >= 2:
        return Assessment(
            Status.SEEK_CARE,
            Urgency.URGENT,
            "Multiple concerning vitals detected. Seek medical attention within 2-4 hours.",
            tuple(parts),
        )
    if concerning == 1:
        return Assessment(
            Status.SEEK_CARE,
            Urgency.ROUTINE,
            "One concerning vital detected. Schedule a consultation within 24-48 hours.",
            tuple(parts),
        )
    if RiskLevel.MONITOR in levels:
        return Assessment(
            Status.MONITOR,
            Urgency.NONE,
            "Some vitals are slightly outside the typical range. Keep monitoring.",
            tuple(parts),
        )
    return Assessment(
        Status.HEALTHY,
        Urgency.NONE,
        "All vital signs are within healthy ranges. Continue regular monitoring.",
        tuple(parts),
    )


def interpret_reading(
    reading: VitalsReading,
    temperature_c: Optional[float] = None,
) -> Assessment:
    """Classify a reading plus an optional externally measured temperature."""
    parts = [interpret_heart_rate(reading.heart_rate_bpm)]
    if reading.spo2_pct is not None:
        parts.append(interpret_spo2(reading.spo2_pct))
    if temperature_c is not None:
        parts.append(interpret_temperature(temperature_c))
    return overall_assessment(parts)
