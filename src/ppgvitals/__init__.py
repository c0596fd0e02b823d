"""Vitals signal-processing engine.

Turns camera (finger on lens), microphone or accelerometer sample streams
into heart rate, confidence and a heuristic SpO2 estimate.
"""

__all__ = [
    "config",
    "models",
    "contact",
    "preprocess",
    "peaks",
    "intervals",
    "quality",
    "respiration",
    "estimator",
    "pipeline",
    "session",
    "interpret",
    "simulate",
    "capture",
    "cli",
]

__version__ = "0.1.0"
