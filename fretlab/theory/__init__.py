"""Theory layer - note/frequency math and fretboard lookups."""

from .frequency import (
    pitch_class,
    parse_note,
    frequency_of,
    midi_of,
    note_of,
    note_at_fret,
    fretted_frequency,
    cents_between,
)
from .fretboard import (
    scale_degree,
    interval_name,
    fretboard_notes,
    nearest_string,
    string_label,
)

__all__ = [
    "pitch_class",
    "parse_note",
    "frequency_of",
    "midi_of",
    "note_of",
    "note_at_fret",
    "fretted_frequency",
    "cents_between",
    "scale_degree",
    "interval_name",
    "fretboard_notes",
    "nearest_string",
    "string_label",
]
