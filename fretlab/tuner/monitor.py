"""Tuner readings: nearest note, stability and tuning direction."""

from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..core import NoteResult, PitchEstimate
from ..core.constants import (
    STABILITY_HISTORY,
    STABILITY_WINDOW,
    STABILITY_TOLERANCE_HZ,
    IN_TUNE_CENTS,
    STANDARD_TUNING,
)
from ..theory import note_of, nearest_string


class StabilityTracker:
    """Judges whether recent frequency readings have settled.

    Readings are stable once the most recent `window` values all lie within
    `tolerance_hz` of their mean. Only the display uses this; the estimates
    themselves are never smoothed.
    """

    def __init__(
        self,
        history_size: int = STABILITY_HISTORY,
        window: int = STABILITY_WINDOW,
        tolerance_hz: float = STABILITY_TOLERANCE_HZ,
    ):
        if window > history_size:
            raise ValueError("window cannot exceed history_size")
        self.window = window
        self.tolerance_hz = tolerance_hz
        self._history = deque(maxlen=history_size)

    @property
    def history(self) -> List[float]:
        return list(self._history)

    @property
    def is_stable(self) -> bool:
        if len(self._history) < self.window:
            return False
        recent = np.array(self.history[-self.window :])
        return bool(np.max(np.abs(recent - recent.mean())) < self.tolerance_hz)

    def push(self, frequency: float) -> bool:
        """Record a reading and return the new stability judgment."""
        self._history.append(frequency)
        return self.is_stable

    def reset(self) -> None:
        self._history.clear()


@dataclass(frozen=True)
class TunerReading:
    """What the tuner display shows for one frame."""

    estimate: PitchEstimate
    note: Optional[NoteResult] = None
    stable: bool = False
    string_index: Optional[int] = None
    in_tune_cents: int = IN_TUNE_CENTS

    @property
    def status(self) -> Optional[str]:
        """'in_tune', 'too_low', 'too_high', or None without a note."""
        if self.note is None:
            return None
        if abs(self.note.cents) < self.in_tune_cents:
            return "in_tune"
        return "too_low" if self.note.cents < 0 else "too_high"


class TuningMonitor:
    """Converts pitch estimates into tuner readings.

    Instances are callable, so one can be passed directly as a PitchTracker
    on_estimate callback.
    """

    def __init__(
        self,
        tuning: Sequence[Tuple[str, int]] = STANDARD_TUNING,
        stability: Optional[StabilityTracker] = None,
        in_tune_cents: int = IN_TUNE_CENTS,
        on_reading: Optional[Callable[[TunerReading], None]] = None,
    ):
        self.tuning = list(tuning)
        self.stability = stability or StabilityTracker()
        self.in_tune_cents = in_tune_cents
        self.on_reading = on_reading
        self.last_reading: Optional[TunerReading] = None

    def update(self, estimate: PitchEstimate) -> TunerReading:
        if estimate.is_voiced:
            stable = self.stability.push(estimate.frequency)
            string_index, _ = nearest_string(estimate.frequency, self.tuning)
            reading = TunerReading(
                estimate=estimate,
                note=note_of(estimate.frequency),
                stable=stable,
                string_index=string_index,
                in_tune_cents=self.in_tune_cents,
            )
        else:
            self.stability.reset()
            reading = TunerReading(estimate=estimate, in_tune_cents=self.in_tune_cents)

        self.last_reading = reading
        if self.on_reading is not None:
            self.on_reading(reading)
        return reading

    __call__ = update
