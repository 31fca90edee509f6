"""Global constants for fretlab."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Reference pitch
A4_FREQUENCY = 440.0
A4_OCTAVE = 4

# Standard tuning, low E (index 0) to high E
STANDARD_TUNING = [("E", 2), ("A", 2), ("D", 3), ("G", 3), ("B", 3), ("E", 4)]
MAX_FRET = 24

# Audio device defaults
DEFAULT_SR = 44100
DEFAULT_BLOCKSIZE = 512

# Pitch detection
DEFAULT_WINDOW_SIZE = 2048  # must be a power of two
NOISE_FLOOR = 0.01  # mean absolute amplitude on [-1, 1]
CLARITY_THRESHOLD = 0.9
MIN_FREQUENCY = 60.0
MAX_FREQUENCY = 1200.0
DEFAULT_FRAME_RATE = 60.0  # frames per second

# Stability judgment
STABILITY_HISTORY = 10
STABILITY_WINDOW = 5
STABILITY_TOLERANCE_HZ = 1.0
IN_TUNE_CENTS = 5

# Tone synthesis
ENVELOPE_FLOOR = 0.00001
ENVELOPE_PEAK = 0.5
ATTACK_MS = 10
DEFAULT_TONE_MS = 2000
WAVEFORMS = ("triangle", "sine", "square", "sawtooth")

# Metronome
DEFAULT_BPM = 80
MIN_BPM = 30
MAX_BPM = 250
DEFAULT_BEATS_PER_MEASURE = 4
BEATS_PER_MEASURE_RANGE = (2, 8)
ACCENT_FREQUENCY = 1000.0
TICK_FREQUENCY = 800.0
TICK_MS = 100
