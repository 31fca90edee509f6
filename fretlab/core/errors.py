"""Audio subsystem errors."""


class AudioError(Exception):
    """Base class for recoverable audio failures."""


class DeviceUnavailableError(AudioError):
    """The audio output device could not be opened."""


class MicrophoneError(AudioError):
    """Microphone access was denied or the capture device failed."""
