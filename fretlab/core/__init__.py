"""Core types and constants for fretlab."""

from .types import NoteResult, PitchEstimate, ToneRequest
from .errors import AudioError, DeviceUnavailableError, MicrophoneError
from .constants import (
    PITCH_NAMES,
    A4_FREQUENCY,
    STANDARD_TUNING,
    DEFAULT_SR,
    DEFAULT_WINDOW_SIZE,
)

__all__ = [
    "NoteResult",
    "PitchEstimate",
    "ToneRequest",
    "AudioError",
    "DeviceUnavailableError",
    "MicrophoneError",
    "PITCH_NAMES",
    "A4_FREQUENCY",
    "STANDARD_TUNING",
    "DEFAULT_SR",
    "DEFAULT_WINDOW_SIZE",
]
