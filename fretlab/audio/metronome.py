"""Metronome driven by scheduler timers."""

from typing import Callable, Optional

from .synth import ToneSynthesizer
from ..core.constants import (
    DEFAULT_BPM,
    MIN_BPM,
    MAX_BPM,
    DEFAULT_BEATS_PER_MEASURE,
    BEATS_PER_MEASURE_RANGE,
    ACCENT_FREQUENCY,
    TICK_FREQUENCY,
    TICK_MS,
)
from ..scheduling import Scheduler


class Metronome:
    """Plays an accented tick on the first beat of every measure."""

    def __init__(
        self,
        synth: ToneSynthesizer,
        scheduler: Scheduler,
        bpm: float = DEFAULT_BPM,
        beats_per_measure: int = DEFAULT_BEATS_PER_MEASURE,
        on_beat: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize Metronome.

        Args:
            synth: Synthesizer used for the ticks
            scheduler: Timer source
            bpm: Tempo, clamped to MIN_BPM..MAX_BPM
            beats_per_measure: Beats per measure (2-8)
            on_beat: Called with the beat index (0 = accented) on every tick
        """
        self.synth = synth
        self.scheduler = scheduler
        self.on_beat = on_beat
        self.bpm = self.clamp_bpm(bpm)
        self.current_beat = 0
        self.beats_per_measure = DEFAULT_BEATS_PER_MEASURE
        self.set_beats_per_measure(beats_per_measure)
        self._handle = None

    @staticmethod
    def clamp_bpm(bpm: float) -> float:
        return max(MIN_BPM, min(MAX_BPM, bpm))

    @property
    def interval(self) -> float:
        """Seconds between beats."""
        return 60.0 / self.bpm

    @property
    def is_playing(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Start ticking; the first, accented beat plays immediately."""
        if self.is_playing:
            return
        self.current_beat = 0
        self._tick()
        self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def update_bpm(self, bpm: float) -> float:
        """Change tempo; takes effect from the next beat. Returns the clamped BPM."""
        self.bpm = self.clamp_bpm(bpm)
        if self._handle is not None:
            self._handle.cancel()
            self._schedule()
        return self.bpm

    def set_beats_per_measure(self, beats: int) -> None:
        low, high = BEATS_PER_MEASURE_RANGE
        if not low <= beats <= high:
            raise ValueError(f"beats_per_measure must be in {low}-{high}, got {beats}")
        self.beats_per_measure = beats
        self.current_beat %= beats

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.interval, self._advance)

    def _advance(self) -> None:
        self.current_beat = (self.current_beat + 1) % self.beats_per_measure
        self._tick()
        self._schedule()

    def _tick(self) -> None:
        accent = self.current_beat == 0
        frequency = ACCENT_FREQUENCY if accent else TICK_FREQUENCY
        self.synth.play(frequency, TICK_MS, waveform="sine")
        if self.on_beat is not None:
            self.on_beat(self.current_beat)
