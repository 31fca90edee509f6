"""Fretboard lookups built on the note math."""

from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from .frequency import pitch_class, note_at_fret, frequency_of, cents_between
from ..core.constants import STANDARD_TUNING

SCALE_DEGREES = ["1", "b2", "2", "b3", "3", "4", "#4/b5", "5", "b6", "6", "b7", "7"]
INTERVALS = ["R", "m2", "M2", "m3", "M3", "P4", "TT", "P5", "m6", "M6", "m7", "M7"]


def scale_degree(note: str, root: str) -> str:
    """Scale degree of note relative to root (e.g. 'b3')."""
    return SCALE_DEGREES[(pitch_class(note) - pitch_class(root)) % 12]


def interval_name(note: str, root: str) -> str:
    """Interval name of note above root (e.g. 'P5')."""
    return INTERVALS[(pitch_class(note) - pitch_class(root)) % 12]


@lru_cache(maxsize=32)
def _fretboard(tuning: Tuple[str, ...], frets: int) -> Tuple[Tuple[str, ...], ...]:
    return tuple(
        tuple(note_at_fret(open_note, fret) for fret in range(frets + 1))
        for open_note in tuning
    )


def fretboard_notes(
    tuning: Optional[Sequence[str]] = None,
    frets: int = 24,
) -> List[List[str]]:
    """
    Pitch classes for every string and fret.

    Args:
        tuning: Open string names, low string first (default: standard)
        frets: Highest fret to include

    Returns:
        Nested list indexed as [string][fret]
    """
    if tuning is None:
        tuning = [name for name, _ in STANDARD_TUNING]
    if frets < 0:
        raise ValueError(f"frets must be non-negative, got {frets}")
    return [list(row) for row in _fretboard(tuple(tuning), frets)]


def nearest_string(
    frequency: float,
    tuning: Sequence[Tuple[str, int]] = STANDARD_TUNING,
) -> Tuple[int, float]:
    """
    Open string closest to a frequency, measured in cents.

    Returns:
        Tuple of (string index, cents from that open string)
    """
    best_index, best_cents = 0, None
    for index, (name, octave) in enumerate(tuning):
        cents = cents_between(frequency, frequency_of(name, octave))
        if best_cents is None or abs(cents) < abs(best_cents):
            best_index, best_cents = index, cents
    return best_index, best_cents


def string_label(index: int, tuning: Sequence[Tuple[str, int]] = STANDARD_TUNING) -> str:
    name, octave = tuning[index]
    return f"{name}{octave}"
