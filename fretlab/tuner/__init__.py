"""Tuner layer - live pitch tracking and tuning feedback."""

from .tracker import PitchTracker, CaptureSession
from .monitor import StabilityTracker, TunerReading, TuningMonitor

__all__ = [
    "PitchTracker",
    "CaptureSession",
    "StabilityTracker",
    "TunerReading",
    "TuningMonitor",
]
