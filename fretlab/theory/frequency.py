"""Equal-temperament note and frequency conversion.

All functions are pure; the table lookups are memoized since the tuner and
the fretboard call them for the same handful of notes over and over.
"""

import math
from functools import lru_cache

import numpy as np

from ..core import NoteResult
from ..core.constants import PITCH_NAMES, A4_FREQUENCY, A4_OCTAVE

A4_INDEX = PITCH_NAMES.index("A") + 12 * A4_OCTAVE

# Flat spellings accepted on input, always reported as sharps
FLAT_TO_SHARP = {
    "Db": "C#",
    "Eb": "D#",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
}


def pitch_class(name: str) -> int:
    """Get chromatic index (0-11, where 0=C) of a note name."""
    name = FLAT_TO_SHARP.get(name, name)
    try:
        return PITCH_NAMES.index(name)
    except ValueError:
        raise ValueError(f"Unknown note name: {name!r}") from None


def parse_note(label: str) -> tuple:
    """Split a label like 'A4' or 'C#3' into (name, octave)."""
    label = label.strip()
    split = len(label)
    while split > 0 and (label[split - 1].isdigit() or label[split - 1] == "-"):
        split -= 1
    name, octave = label[:split], label[split:]
    if not name or not octave:
        raise ValueError(f"Expected a note with octave, e.g. 'A4': {label!r}")
    return FLAT_TO_SHARP.get(name, name), int(octave)


@lru_cache(maxsize=512)
def frequency_of(name: str, octave: int) -> float:
    """
    Frequency of a note in equal temperament (A4 = 440 Hz).

    Args:
        name: Pitch class name ('C' .. 'B', sharps or flats)
        octave: Scientific pitch octave (C4 = middle C)

    Returns:
        Frequency in Hz
    """
    half_steps = pitch_class(name) + 12 * octave - A4_INDEX
    return A4_FREQUENCY * 2.0 ** (half_steps / 12.0)


def midi_of(name: str, octave: int) -> int:
    """MIDI pitch of a note (A4 = 69)."""
    return (octave + 1) * 12 + pitch_class(name)


def cents_between(frequency: float, reference: float) -> float:
    """Interval from reference to frequency in cents."""
    if frequency <= 0 or reference <= 0:
        raise ValueError("Frequencies must be positive")
    return 1200.0 * math.log2(frequency / reference)


def note_of(frequency: float) -> NoteResult:
    """
    Nearest equal-temperament note for a frequency.

    The semitone is rounded first, so the cents deviation always lies in
    [-50, 50].

    Args:
        frequency: Frequency in Hz

    Returns:
        NoteResult with pitch class, octave and cents deviation

    Raises:
        ValueError: If frequency is not a positive finite number
    """
    if not np.isfinite(frequency) or frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")

    half_steps = int(round(12 * math.log2(frequency / A4_FREQUENCY)))
    expected = A4_FREQUENCY * 2.0 ** (half_steps / 12.0)
    cents = int(round(cents_between(frequency, expected)))

    # Absolute chromatic index counted from C0
    index = A4_INDEX + half_steps
    return NoteResult(
        name=PITCH_NAMES[index % 12],
        octave=index // 12,
        cents=cents,
    )


@lru_cache(maxsize=1024)
def note_at_fret(open_note: str, fret: int) -> str:
    """Pitch class sounding at a fret on a string tuned to open_note."""
    return PITCH_NAMES[(pitch_class(open_note) + fret) % 12]


def fretted_frequency(open_note: str, open_octave: int, fret: int) -> float:
    """Frequency of a fretted string, one semitone per fret."""
    return frequency_of(open_note, open_octave) * 2.0 ** (fret / 12.0)
