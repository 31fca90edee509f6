"""fretlab - Guitar tuner, tone synthesizer and fretboard math.

Architecture Layers:
    1. core/       - Constants, result types, errors
    2. theory/     - Note/frequency math and fretboard lookups
    3. audio/      - Device handle, mixer, tone synthesis, metronome
    4. analysis/   - Autocorrelation pitch detection
    5. tuner/      - Live pitch tracking and tuning feedback
    6. input/      - Loading recordings for offline analysis
"""

__version__ = "0.1.0"

# Core types
from .core import NoteResult, PitchEstimate, ToneRequest

# Theory layer
from .theory import frequency_of, note_of, note_at_fret

# Audio layer
from .audio import AudioDevice, ToneSynthesizer, Metronome

# Analysis layer
from .analysis import PitchDetector

# Tuner layer
from .tuner import PitchTracker, StabilityTracker, TuningMonitor

# Input layer
from .input import AudioLoader

# Scheduling
from .scheduling import Scheduler, AsyncioScheduler

__all__ = [
    # Core
    "NoteResult",
    "PitchEstimate",
    "ToneRequest",
    # Theory
    "frequency_of",
    "note_of",
    "note_at_fret",
    # Audio
    "AudioDevice",
    "ToneSynthesizer",
    "Metronome",
    # Analysis
    "PitchDetector",
    # Tuner
    "PitchTracker",
    "StabilityTracker",
    "TuningMonitor",
    # Input
    "AudioLoader",
    # Scheduling
    "Scheduler",
    "AsyncioScheduler",
]
