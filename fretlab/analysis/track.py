"""Frame-by-frame pitch tracking over recorded audio."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import librosa
import numpy as np

from .pitch import PitchDetector
from ..core import NoteResult, PitchEstimate
from ..core.constants import DEFAULT_WINDOW_SIZE
from ..theory import note_of


@dataclass
class NoteSegment:
    """A run of consecutive frames that resolved to the same note."""

    note: NoteResult
    onset: float  # Start time in seconds
    offset: float  # End time in seconds
    frequency: float  # Median frequency over the segment

    @property
    def duration(self) -> float:
        """Segment duration in seconds."""
        return self.offset - self.onset


def track_pitch(
    audio: np.ndarray,
    sr: int,
    detector: Optional[PitchDetector] = None,
    window_size: int = DEFAULT_WINDOW_SIZE,
    hop_length: int = 512,
) -> Tuple[np.ndarray, List[PitchEstimate]]:
    """
    Run the detector over sliding windows of a recording.

    Args:
        audio: Mono audio array
        sr: Sample rate
        detector: PitchDetector to use (default settings if None)
        window_size: Samples per analysis window
        hop_length: Samples between windows

    Returns:
        Tuple of (window start times in seconds, estimates)
    """
    detector = detector or PitchDetector()
    if len(audio) < window_size:
        return np.zeros(0), []

    frames = librosa.util.frame(
        np.ascontiguousarray(audio), frame_length=window_size, hop_length=hop_length
    )
    estimates = [detector.estimate(frames[:, i], sr) for i in range(frames.shape[1])]
    times = librosa.frames_to_time(
        np.arange(frames.shape[1]), sr=sr, hop_length=hop_length
    )
    return times, estimates


def segment_notes(
    times: np.ndarray,
    estimates: List[PitchEstimate],
    frame_duration: float,
    min_duration: float = 0.1,
) -> List[NoteSegment]:
    """
    Group voiced frames into note segments.

    A segment ends at an unvoiced frame or when the nearest note changes.
    Segments shorter than min_duration are dropped.
    """
    segments = []
    current_label = None
    start_time = 0.0
    freqs: List[float] = []

    def close(end_time: float) -> None:
        if current_label is None or end_time - start_time < min_duration:
            return
        median_freq = float(np.median(freqs))
        segments.append(
            NoteSegment(
                note=note_of(median_freq),
                onset=float(start_time),
                offset=float(end_time),
                frequency=median_freq,
            )
        )

    for time, estimate in zip(times, estimates):
        label = note_of(estimate.frequency).label if estimate.is_voiced else None
        if label != current_label:
            close(time)
            current_label = label
            start_time = time
            freqs = []
        if label is not None:
            freqs.append(estimate.frequency)

    if len(times) > 0:
        close(times[-1] + frame_duration)

    return segments
