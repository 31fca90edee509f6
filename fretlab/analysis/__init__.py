"""Analysis layer - pitch detection on raw sample windows."""

from .pitch import (
    PitchDetector,
    normalized_autocorrelation,
    mean_amplitude,
    parabolic_interpolation,
)
from .track import NoteSegment, track_pitch, segment_notes

__all__ = [
    "PitchDetector",
    "normalized_autocorrelation",
    "mean_amplitude",
    "parabolic_interpolation",
    "NoteSegment",
    "track_pitch",
    "segment_notes",
]
