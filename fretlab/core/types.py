"""Result types shared by the tuner and the synthesizer."""

from dataclasses import dataclass
from typing import Optional

from .constants import DEFAULT_TONE_MS, PITCH_NAMES


@dataclass(frozen=True)
class NoteResult:
    """Nearest equal-temperament note for a frequency."""

    name: str  # Pitch class, e.g. 'A#'
    octave: int
    cents: int  # Deviation from the nearest semitone

    @property
    def label(self) -> str:
        """Get note label (e.g., 'A4', 'C#3')."""
        return f"{self.name}{self.octave}"

    @property
    def midi(self) -> int:
        """MIDI number of the nearest semitone."""
        return (self.octave + 1) * 12 + PITCH_NAMES.index(self.name)


@dataclass(frozen=True)
class PitchEstimate:
    """One sampling frame's pitch estimate."""

    frequency: Optional[float]  # None when no confident pitch
    clarity: float = 0.0  # Best normalized correlation
    amplitude: float = 0.0  # Mean absolute amplitude of the window

    @property
    def is_voiced(self) -> bool:
        return self.frequency is not None


@dataclass(frozen=True)
class ToneRequest:
    """A single synthesized tone."""

    frequency: float  # Hz
    start_time: float  # Device time in seconds
    duration_ms: int = DEFAULT_TONE_MS
    waveform: str = "triangle"

    @property
    def duration(self) -> float:
        """Tone duration in seconds."""
        return self.duration_ms / 1000.0
