"""Audio device handle: output mixer and microphone capture.

The application creates one AudioDevice and passes it to every component that
plays or records sound. The output stream is opened on the first tone and
stays open afterwards; reopening it per tone is what produces audible glitches.

sounddevice is imported when a stream is first opened so that the rest of the
package works on machines without PortAudio.
"""

import asyncio
import threading
import warnings
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .analyser import Analyser
from ..core.constants import DEFAULT_SR, DEFAULT_BLOCKSIZE
from ..core.errors import DeviceUnavailableError, MicrophoneError


@dataclass
class Voice:
    """Rendered samples scheduled to start at a device frame."""

    samples: np.ndarray
    start_frame: int
    on_complete: Optional[Callable[[], None]] = None

    @property
    def end_frame(self) -> int:
        return self.start_frame + len(self.samples)


class Mixer:
    """Sums scheduled voices into output blocks.

    A voice is dropped, and its on_complete called, in the block that renders
    its last sample.
    """

    def __init__(self, sample_rate: int = DEFAULT_SR):
        self.sample_rate = sample_rate
        self._voices: List[Voice] = []
        self._frame = 0
        self._lock = threading.Lock()

    @property
    def current_frame(self) -> int:
        return self._frame

    @property
    def current_time(self) -> float:
        """Seconds of audio rendered so far."""
        return self._frame / self.sample_rate

    @property
    def active_voices(self) -> int:
        with self._lock:
            return len(self._voices)

    def add(self, voice: Voice) -> None:
        with self._lock:
            self._voices.append(voice)

    def render(self, frames: int) -> np.ndarray:
        """Mix the next block of output."""
        out = np.zeros(frames, dtype=np.float32)
        finished = []

        with self._lock:
            block_start = self._frame
            block_end = block_start + frames
            remaining = []
            for voice in self._voices:
                start = max(voice.start_frame, block_start)
                end = min(voice.end_frame, block_end)
                if end > start:
                    offset = voice.start_frame
                    out[start - block_start : end - block_start] += voice.samples[
                        start - offset : end - offset
                    ]
                if voice.end_frame <= block_end:
                    finished.append(voice)
                else:
                    remaining.append(voice)
            self._voices = remaining
            self._frame = block_end

        for voice in finished:
            if voice.on_complete is not None:
                voice.on_complete()

        np.clip(out, -1.0, 1.0, out=out)
        return out


class AudioDevice:
    """Shared handle on the sound card."""

    def __init__(
        self,
        sample_rate: int = DEFAULT_SR,
        blocksize: int = DEFAULT_BLOCKSIZE,
        output_device=None,
        input_device=None,
    ):
        """
        Initialize AudioDevice.

        Args:
            sample_rate: Sample rate for both output and capture
            blocksize: Frames per stream callback
            output_device: sounddevice output device id or name (None = default)
            input_device: sounddevice input device id or name (None = default)
        """
        self.sample_rate = sample_rate
        self.blocksize = blocksize
        self.output_device = output_device
        self.input_device = input_device
        self.mixer = Mixer(sample_rate)
        self._output_stream = None
        self._output_error: Optional[DeviceUnavailableError] = None

    @property
    def current_time(self) -> float:
        return self.mixer.current_time

    @property
    def output_open(self) -> bool:
        return self._output_stream is not None

    def schedule(self, voice: Voice) -> None:
        """
        Queue a voice for playback, opening the output stream if needed.

        Raises:
            DeviceUnavailableError: If the output stream cannot be opened
        """
        self.start_output()
        self.mixer.add(voice)

    def start_output(self) -> None:
        if self._output_stream is not None:
            return
        # Do not retry a device that already failed to open
        if self._output_error is not None:
            raise self._output_error
        try:
            self._output_stream = self._open_output_stream()
        except DeviceUnavailableError as e:
            self._output_error = e
            raise

    def _open_output_stream(self):
        try:
            import sounddevice as sd

            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                blocksize=self.blocksize,
                channels=1,
                dtype="float32",
                device=self.output_device,
                callback=self._output_callback,
            )
            stream.start()
        except Exception as e:
            raise DeviceUnavailableError(f"Cannot open audio output: {e}") from e
        return stream

    def _output_callback(self, outdata, frames, time_info, status) -> None:
        outdata[:, 0] = self.mixer.render(frames)

    async def open_microphone(self, analyser: Analyser):
        """
        Start capturing the microphone into an analyser.

        Opening the stream can block on the OS permission prompt, so it runs
        in a worker thread.

        Returns:
            The started input stream (has active, stop() and close())

        Raises:
            MicrophoneError: If access is denied or the device fails
        """
        return await asyncio.to_thread(self._open_input_stream, analyser)

    def _open_input_stream(self, analyser: Analyser):
        try:
            import sounddevice as sd

            def callback(indata, frames, time_info, status):
                analyser.write(indata[:, 0])

            stream = sd.InputStream(
                samplerate=self.sample_rate,
                blocksize=self.blocksize,
                channels=1,
                dtype="float32",
                device=self.input_device,
                callback=callback,
            )
            stream.start()
        except Exception as e:
            raise MicrophoneError(f"Cannot open microphone: {e}") from e
        return stream

    def close(self) -> None:
        """Stop the output stream. Only needed at process shutdown."""
        stream, self._output_stream = self._output_stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception as e:
            warnings.warn(f"Failed to close audio output: {e}", RuntimeWarning)
