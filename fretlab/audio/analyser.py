"""Rolling window of the most recent input samples."""

import threading

import numpy as np

from ..core.constants import DEFAULT_WINDOW_SIZE


class Analyser:
    """Keeps the last fft_size samples written by the capture callback."""

    def __init__(self, fft_size: int = DEFAULT_WINDOW_SIZE):
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two >= 32, got {fft_size}")
        self.fft_size = fft_size
        self._buffer = np.zeros(fft_size, dtype=np.float32)
        self._written = 0
        self._lock = threading.Lock()

    @property
    def samples_written(self) -> int:
        return self._written

    def write(self, samples: np.ndarray) -> None:
        """Append samples, discarding the oldest."""
        samples = np.asarray(samples, dtype=np.float32).ravel()
        n = len(samples)
        if n == 0:
            return
        with self._lock:
            if n >= self.fft_size:
                self._buffer[:] = samples[-self.fft_size :]
            else:
                self._buffer[:-n] = self._buffer[n:]
                self._buffer[-n:] = samples
            self._written += n

    def get_time_domain_data(self) -> np.ndarray:
        """Copy of the current window, oldest sample first."""
        with self._lock:
            return self._buffer.copy()

    def clear(self) -> None:
        with self._lock:
            self._buffer.fill(0.0)
            self._written = 0
