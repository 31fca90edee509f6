"""Envelope-shaped tone synthesis for string playback and metronome ticks."""

import math
import threading
import warnings
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import signal

from .device import AudioDevice, Voice
from ..core import ToneRequest
from ..core.constants import (
    ATTACK_MS,
    DEFAULT_TONE_MS,
    ENVELOPE_FLOOR,
    ENVELOPE_PEAK,
    MAX_FRET,
    STANDARD_TUNING,
    WAVEFORMS,
)
from ..core.errors import DeviceUnavailableError
from ..theory import fretted_frequency


def oscillator(waveform: str, frequency: float, t: np.ndarray) -> np.ndarray:
    """Periodic waveform in [-1, 1] sampled at times t (seconds)."""
    phase = 2 * np.pi * frequency * t
    if waveform == "sine":
        return np.sin(phase)
    if waveform == "triangle":
        return signal.sawtooth(phase, width=0.5)
    if waveform == "square":
        return signal.square(phase)
    if waveform == "sawtooth":
        return signal.sawtooth(phase)
    raise ValueError(f"Unknown waveform: {waveform}. Supported: {WAVEFORMS}")


def exponential_envelope(
    n_samples: int,
    sample_rate: int,
    attack_ms: float = ATTACK_MS,
    peak: float = ENVELOPE_PEAK,
    floor: float = ENVELOPE_FLOOR,
) -> np.ndarray:
    """
    Exponential attack from floor to peak, then exponential decay to floor.

    Exponential ramps cannot start from zero, hence the positive floor. The
    last sample is exactly the floor. The attack is shortened to half the
    tone for very short tones.

    Args:
        n_samples: Envelope length
        sample_rate: Sample rate in Hz
        attack_ms: Attack time in milliseconds
        peak: Peak gain
        floor: Starting and final gain

    Returns:
        Gain per sample
    """
    if n_samples < 2:
        raise ValueError(f"Envelope needs at least 2 samples, got {n_samples}")
    attack = int(round(attack_ms / 1000.0 * sample_rate))
    attack = max(1, min(attack, n_samples // 2))

    envelope = np.empty(n_samples)
    envelope[:attack] = np.geomspace(floor, peak, attack, endpoint=False)
    envelope[attack:] = np.geomspace(peak, floor, n_samples - attack)
    return envelope


def render_tone(
    request: ToneRequest,
    sample_rate: int,
    attack_ms: float = ATTACK_MS,
    peak: float = ENVELOPE_PEAK,
    floor: float = ENVELOPE_FLOOR,
) -> np.ndarray:
    """Render a tone request to float32 samples."""
    n_samples = int(round(request.duration * sample_rate))
    t = np.arange(n_samples) / sample_rate
    wave = oscillator(request.waveform, request.frequency, t)
    envelope = exponential_envelope(n_samples, sample_rate, attack_ms, peak, floor)
    return (wave * envelope).astype(np.float32)


class ToneSynthesizer:
    """Fire-and-forget tones on a shared AudioDevice.

    Overlapping tones are mixed, so strumming several strings sounds like a
    chord. Audio is an enhancement: failures are reported with a warning and
    never raised to the caller.
    """

    def __init__(
        self,
        device: AudioDevice,
        tuning: Sequence[Tuple[str, int]] = STANDARD_TUNING,
        attack_ms: float = ATTACK_MS,
        peak: float = ENVELOPE_PEAK,
        floor: float = ENVELOPE_FLOOR,
    ):
        """
        Initialize ToneSynthesizer.

        Args:
            device: Shared audio device
            tuning: Open strings as (name, octave), low string first
            attack_ms: Envelope attack time
            peak: Envelope peak gain
            floor: Envelope start/end gain (must be positive)
        """
        if floor <= 0 or peak <= floor:
            raise ValueError("Envelope needs 0 < floor < peak")
        self.device = device
        self.tuning = list(tuning)
        self.attack_ms = attack_ms
        self.peak = peak
        self.floor = floor
        self._unavailable = False
        self._active = 0
        self._lock = threading.Lock()

    @property
    def available(self) -> bool:
        """False once the output device has failed to open."""
        return not self._unavailable

    @property
    def active_tones(self) -> int:
        """Tones scheduled by this synthesizer that are still sounding."""
        with self._lock:
            return self._active

    def _tone_finished(self) -> None:
        # Called from the audio thread when the mixer drops the voice
        with self._lock:
            self._active -= 1

    def play(
        self,
        frequency: float,
        duration_ms: int = DEFAULT_TONE_MS,
        waveform: str = "triangle",
    ) -> Optional[ToneRequest]:
        """
        Play a decaying tone without blocking.

        Args:
            frequency: Tone frequency in Hz (must be positive)
            duration_ms: Total tone length including the attack
            waveform: One of 'triangle', 'sine', 'square', 'sawtooth'

        Returns:
            The scheduled ToneRequest, or None if nothing was played
        """
        if self._unavailable:
            return None
        if not math.isfinite(frequency) or frequency <= 0:
            warnings.warn(f"Ignoring tone with invalid frequency {frequency}", RuntimeWarning)
            return None
        if waveform not in WAVEFORMS:
            warnings.warn(f"Ignoring tone with unknown waveform {waveform!r}", RuntimeWarning)
            return None
        sample_rate = self.device.sample_rate
        if int(round(duration_ms / 1000.0 * sample_rate)) < 2:
            warnings.warn(f"Ignoring tone with duration {duration_ms} ms", RuntimeWarning)
            return None

        request = ToneRequest(
            frequency=float(frequency),
            start_time=self.device.current_time,
            duration_ms=int(duration_ms),
            waveform=waveform,
        )
        try:
            samples = render_tone(request, sample_rate, self.attack_ms, self.peak, self.floor)
            voice = Voice(
                samples=samples,
                start_frame=int(round(request.start_time * sample_rate)),
                on_complete=self._tone_finished,
            )
            with self._lock:
                self._active += 1
            try:
                self.device.schedule(voice)
            except Exception:
                self._tone_finished()
                raise
        except DeviceUnavailableError as e:
            self._unavailable = True
            warnings.warn(f"Audio output unavailable, tones disabled: {e}", RuntimeWarning)
            return None
        except Exception as e:
            warnings.warn(f"Tone playback failed: {e}", RuntimeWarning)
            return None
        return request

    def play_fretted_note(
        self,
        string_index: int,
        fret: int,
        duration_ms: int = DEFAULT_TONE_MS,
    ) -> Optional[ToneRequest]:
        """Play the note at a fret of a string (index 0 = lowest string)."""
        if not 0 <= string_index < len(self.tuning):
            warnings.warn(f"Ignoring invalid string index {string_index}", RuntimeWarning)
            return None
        if not 0 <= fret <= MAX_FRET:
            warnings.warn(f"Ignoring fret {fret} outside 0-{MAX_FRET}", RuntimeWarning)
            return None
        name, octave = self.tuning[string_index]
        return self.play(fretted_frequency(name, octave, fret), duration_ms)

    def play_reference(self, string_index: int) -> Optional[ToneRequest]:
        """Reference tone for tuning an open string."""
        return self.play_fretted_note(string_index, 0)
