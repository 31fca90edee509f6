"""Shared fixtures: fake audio hardware and a manually driven scheduler."""

import asyncio

import pytest

from fretlab.audio import AudioDevice
from fretlab.core.errors import DeviceUnavailableError, MicrophoneError
from fretlab.scheduling import Scheduler


class FakeStream:
    """Stands in for a sounddevice stream."""

    def __init__(self):
        self.active = True
        self.stopped = False
        self.closed = False

    def stop(self):
        self.active = False
        self.stopped = True

    def close(self):
        self.closed = True


class FakeDevice(AudioDevice):
    """AudioDevice without PortAudio behind it."""

    def __init__(self, sample_rate=44100, deny_microphone=False, fail_output=False):
        super().__init__(sample_rate=sample_rate)
        self.deny_microphone = deny_microphone
        self.fail_output = fail_output
        self.output_attempts = 0
        self.input_streams = []
        self.analysers = []

    def _open_output_stream(self):
        self.output_attempts += 1
        if self.fail_output:
            raise DeviceUnavailableError("no output device")
        return FakeStream()

    async def open_microphone(self, analyser):
        # Yield like a real permission request would
        await asyncio.sleep(0)
        if self.deny_microphone:
            raise MicrophoneError("permission denied")
        stream = FakeStream()
        self.input_streams.append(stream)
        self.analysers.append(analyser)
        return stream


class _Task:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler whose clock only moves when the test says so."""

    def __init__(self, frame_rate=60.0):
        self.frame_rate = frame_rate
        self.time = 0.0
        self._tasks = []

    def call_later(self, delay, callback):
        task = _Task(self.time + delay, callback)
        self._tasks.append(task)
        return task

    @property
    def pending(self):
        self._tasks = [t for t in self._tasks if not t.cancelled]
        return list(self._tasks)

    def run_next(self) -> bool:
        """Run the earliest pending callback. Returns False if none."""
        pending = self.pending
        if not pending:
            return False
        task = min(pending, key=lambda t: t.due)
        self._tasks.remove(task)
        self.time = max(self.time, task.due)
        task.callback()
        return True

    def advance(self, seconds: float) -> None:
        """Run every callback due within the next `seconds`."""
        target = self.time + seconds + 1e-9
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            self.run_next()
        self.time = target


@pytest.fixture
def device():
    return FakeDevice()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def make_device():
    return FakeDevice
