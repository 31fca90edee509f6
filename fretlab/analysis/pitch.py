"""Autocorrelation pitch detection."""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from typing import Optional

from ..core import PitchEstimate
from ..core.constants import (
    NOISE_FLOOR,
    CLARITY_THRESHOLD,
    MIN_FREQUENCY,
    MAX_FREQUENCY,
)

# Guards the normalization against an all-zero window
_EPSILON = 1e-12


def mean_amplitude(buffer: np.ndarray) -> float:
    """Mean absolute amplitude of a window."""
    if len(buffer) == 0:
        return 0.0
    return float(np.mean(np.abs(buffer)))


def normalized_autocorrelation(buffer: np.ndarray) -> np.ndarray:
    """
    Normalized autocorrelation over lags [0, N/2).

    For each lag i the first half-window buffer[0:N/2] is correlated with
    buffer[i:i+N/2] and divided by the mean energy of the two half-windows,
    which bounds the result to [-1, 1] with 1 at lag 0.

    Args:
        buffer: Time-domain samples

    Returns:
        Array of length N/2 indexed by lag
    """
    buffer = np.asarray(buffer, dtype=np.float64)
    half = len(buffer) // 2
    if half == 0:
        return np.zeros(0)

    head = buffer[:half]
    windows = sliding_window_view(buffer, half)[:half]
    correlation = windows @ head

    # Energy of buffer[i:i+half] for every lag from a running sum
    squares = np.concatenate(([0.0], np.cumsum(buffer**2)))
    lagged_energy = squares[half : 2 * half] - squares[:half]
    energy = (squares[half] + lagged_energy) / 2.0

    return correlation / np.maximum(energy, _EPSILON)


def parabolic_interpolation(y: np.ndarray, x: int) -> float:
    """Refine peak position using a parabola fit around index x (y[x-1], y[x], y[x+1])."""
    if x <= 0 or x >= len(y) - 1:
        return float(x)
    y0, y1, y2 = y[x - 1], y[x], y[x + 1]
    denom = y0 - 2.0 * y1 + y2
    if denom == 0:
        return float(x)
    return float(x) + 0.5 * float(y0 - y2) / float(denom)


class PitchDetector:
    """Estimates the fundamental frequency of a single window."""

    def __init__(
        self,
        noise_floor: float = NOISE_FLOOR,
        clarity_threshold: float = CLARITY_THRESHOLD,
        fmin: float = MIN_FREQUENCY,
        fmax: float = MAX_FREQUENCY,
        peak_ratio: float = 0.93,
        refine: bool = True,
    ):
        """
        Initialize PitchDetector.

        Args:
            noise_floor: Minimum mean absolute amplitude to attempt detection
            clarity_threshold: Minimum normalized correlation of the chosen lag
            fmin: Lowest accepted frequency (exclusive)
            fmax: Highest accepted frequency (exclusive)
            peak_ratio: The first correlation peak reaching this fraction of
                the highest peak is taken as the period
            refine: Refine the lag with parabolic interpolation
        """
        self.noise_floor = noise_floor
        self.clarity_threshold = clarity_threshold
        self.fmin = fmin
        self.fmax = fmax
        self.peak_ratio = peak_ratio
        self.refine = refine

    def estimate(self, buffer: np.ndarray, sample_rate: int) -> PitchEstimate:
        """
        Estimate pitch for one window.

        Args:
            buffer: Time-domain samples on a [-1, 1] scale
            sample_rate: Sample rate of the buffer

        Returns:
            PitchEstimate; frequency is None for silence, noise, or a pitch
            outside the accepted range
        """
        buffer = np.asarray(buffer, dtype=np.float64)
        amplitude = mean_amplitude(buffer)
        if amplitude < self.noise_floor:
            return PitchEstimate(frequency=None, clarity=0.0, amplitude=amplitude)

        nsdf = normalized_autocorrelation(buffer)
        lag = self._pick_lag(nsdf)
        if lag is None:
            return PitchEstimate(frequency=None, clarity=0.0, amplitude=amplitude)

        clarity = float(nsdf[lag])
        if clarity <= self.clarity_threshold:
            return PitchEstimate(frequency=None, clarity=clarity, amplitude=amplitude)

        period = parabolic_interpolation(nsdf, lag) if self.refine else float(lag)
        if period <= 0:
            return PitchEstimate(frequency=None, clarity=clarity, amplitude=amplitude)

        frequency = sample_rate / period
        if not (self.fmin < frequency < self.fmax):
            return PitchEstimate(frequency=None, clarity=clarity, amplitude=amplitude)

        return PitchEstimate(frequency=frequency, clarity=clarity, amplitude=amplitude)

    def detect(self, buffer: np.ndarray, sample_rate: int) -> Optional[float]:
        """Estimated frequency in Hz, or None."""
        return self.estimate(buffer, sample_rate).frequency

    def _pick_lag(self, nsdf: np.ndarray) -> Optional[int]:
        """Lag of the first strong correlation peak past the zero-lag lobe."""
        negative = np.flatnonzero(nsdf < 0)
        if len(negative) == 0:
            return None
        start = max(int(negative[0]), 1)

        segment = nsdf[start - 1 :]
        if len(segment) < 3:
            return None
        middle = segment[1:-1]
        is_peak = (middle >= segment[:-2]) & (middle > segment[2:]) & (middle > 0)
        peaks = np.flatnonzero(is_peak) + start
        if len(peaks) == 0:
            return None

        best = nsdf[peaks].max()
        strong = peaks[nsdf[peaks] >= self.peak_ratio * best]
        return int(strong[0])
