"""Recordings for offline pitch analysis.

Clips are brought to the shape the live tuner sees: mono, at the tuner's
sample rate, centred on zero and at least one analysis window long.
"""

from pathlib import Path
from typing import Optional, Tuple

import librosa
import numpy as np

from ..core.constants import DEFAULT_SR, DEFAULT_WINDOW_SIZE


class AudioLoader:
    """Loads recordings as mono float32 arrays at a fixed sample rate."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a"}

    def __init__(
        self,
        target_sr: int = DEFAULT_SR,
        min_samples: int = DEFAULT_WINDOW_SIZE,
        normalize: bool = True,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Sample rate the detector runs at
            min_samples: Shortest accepted clip, normally one analysis window
            normalize: Peak-normalize so quiet takes clear the noise floor
        """
        self.target_sr = target_sr
        self.min_samples = min_samples
        self.normalize = normalize

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load a recording and prepare it for the detector.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the format is not supported or the clip is too short
        """
        path = self._check_path(path)

        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)
        if len(audio) < self.min_samples:
            raise ValueError(
                f"Recording too short: {len(audio)} samples, "
                f"need at least {self.min_samples} at {sr} Hz"
            )

        # A DC offset would count towards the mean amplitude gate
        audio = audio - np.mean(audio)
        if self.normalize:
            audio = librosa.util.normalize(audio)

        return audio.astype(np.float32), sr

    def _check_path(self, path: str) -> Path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")
        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )
        return path

    def get_duration(self, audio: np.ndarray, sr: Optional[int] = None) -> float:
        """Duration in seconds."""
        return librosa.get_duration(y=audio, sr=sr or self.target_sr)
