"""Audio layer - device handle, synthesis and metronome."""

from .analyser import Analyser
from .device import AudioDevice, Mixer, Voice
from .synth import ToneSynthesizer, render_tone, exponential_envelope, oscillator
from .metronome import Metronome

__all__ = [
    "Analyser",
    "AudioDevice",
    "Mixer",
    "Voice",
    "ToneSynthesizer",
    "render_tone",
    "exponential_envelope",
    "oscillator",
    "Metronome",
]
