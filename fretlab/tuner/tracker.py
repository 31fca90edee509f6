"""Live microphone pitch tracking.

States: Idle -> Listening -> Idle. While Listening, one estimate is produced
per frame and handed to the on_estimate callback. The next frame is requested
only after the current one has been delivered, so estimates arrive strictly in
order and stop_listening() can cancel at any point, including from inside the
callback. An exception raised by the callback goes to the scheduler and does
not end the loop; only stop_listening() does.
"""

import warnings
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..analysis import PitchDetector
from ..audio import Analyser, AudioDevice
from ..core import PitchEstimate
from ..core.constants import DEFAULT_WINDOW_SIZE
from ..core.errors import AudioError, MicrophoneError
from ..scheduling import Scheduler


@dataclass
class CaptureSession:
    """An open microphone stream and the state of its sampling loop."""

    stream: Any
    analyser: Analyser
    frame_handle: Any = None
    frames: int = 0

    def close(self) -> None:
        """Cancel the pending frame and release the stream."""
        if self.frame_handle is not None:
            self.frame_handle.cancel()
            self.frame_handle = None
        try:
            self.stream.stop()
            self.stream.close()
        except Exception as e:
            warnings.warn(f"Failed to close microphone stream: {e}", RuntimeWarning)
        self.analyser.clear()


class PitchTracker:
    """Turns a microphone stream into a sequence of PitchEstimates."""

    def __init__(
        self,
        device: AudioDevice,
        scheduler: Scheduler,
        on_estimate: Callable[[PitchEstimate], None],
        on_error: Optional[Callable[[AudioError], None]] = None,
        detector: Optional[PitchDetector] = None,
        window_size: int = DEFAULT_WINDOW_SIZE,
    ):
        """
        Initialize PitchTracker.

        Args:
            device: Shared audio device
            scheduler: Frame source for the sampling loop
            on_estimate: Receives one PitchEstimate per frame
            on_error: Receives microphone failures
            detector: PitchDetector (default settings if None)
            window_size: Samples analysed per frame (power of two)

        Raises:
            ValueError: If window_size is not a power of two >= 32
        """
        if window_size < 32 or window_size & (window_size - 1):
            raise ValueError(f"window_size must be a power of two >= 32, got {window_size}")
        self.device = device
        self.scheduler = scheduler
        self.on_estimate = on_estimate
        self.on_error = on_error
        self.detector = detector or PitchDetector()
        self.window_size = window_size
        self._session: Optional[CaptureSession] = None
        self._pending = False
        self._generation = 0

    @property
    def is_listening(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    async def start_listening(self) -> bool:
        """
        Open the microphone and start the sampling loop.

        Does nothing if already listening or if a start is in progress.
        Failures are reported to on_error and leave the tracker Idle.

        Returns:
            True if the tracker is listening when the call returns
        """
        if self._session is not None or self._pending:
            return self.is_listening

        self._pending = True
        generation = self._generation
        try:
            analyser = Analyser(self.window_size)
            stream = await self.device.open_microphone(analyser)
        except MicrophoneError as e:
            # A start cancelled by stop_listening() is not reported
            if generation == self._generation:
                self._report(e)
            return False
        finally:
            if generation == self._generation:
                self._pending = False

        # stop_listening() was called while the microphone was opening
        if generation != self._generation:
            CaptureSession(stream, analyser).close()
            return False

        self._session = CaptureSession(stream, analyser)
        self._request_frame(self._session)
        return True

    def stop_listening(self) -> None:
        """Stop the sampling loop and release the microphone. No-op when Idle."""
        self._generation += 1
        self._pending = False
        session, self._session = self._session, None
        if session is not None:
            session.close()

    def _request_frame(self, session: CaptureSession) -> None:
        session.frame_handle = self.scheduler.request_frame(
            lambda: self._on_frame(session)
        )

    def _on_frame(self, session: CaptureSession) -> None:
        session.frame_handle = None
        if session is not self._session:
            return

        if not session.stream.active:
            self.stop_listening()
            self._report(MicrophoneError("Microphone stream stopped unexpectedly"))
            return

        buffer = session.analyser.get_time_domain_data()
        estimate = self.detector.estimate(buffer, self.device.sample_rate)
        session.frames += 1
        try:
            self.on_estimate(estimate)
        finally:
            # The callback may have stopped or restarted the tracker
            if session is self._session:
                self._request_frame(session)

    def _report(self, error: AudioError) -> None:
        if self.on_error is not None:
            self.on_error(error)
        else:
            warnings.warn(f"Pitch tracking stopped: {error}", RuntimeWarning)
