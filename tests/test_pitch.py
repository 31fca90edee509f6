"""Tests for autocorrelation pitch detection."""

import numpy as np
import pytest

from fretlab.analysis import (
    PitchDetector,
    normalized_autocorrelation,
    mean_amplitude,
    parabolic_interpolation,
    track_pitch,
    segment_notes,
)

SR = 44100
WINDOW = 2048


def generate_sine_wave(freq: float, n_samples: int = WINDOW, sr: int = SR, amplitude: float = 0.5) -> np.ndarray:
    """Generate a sine wave at given frequency."""
    t = np.arange(n_samples) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def generate_plucked_tone(freq: float, n_samples: int = WINDOW, sr: int = SR) -> np.ndarray:
    """Harmonic-rich tone with 1/k partial amplitudes."""
    t = np.arange(n_samples) / sr
    tone = sum(np.sin(2 * np.pi * freq * k * t) / k for k in range(1, 6))
    return (0.4 * tone / np.max(np.abs(tone))).astype(np.float32)


class TestSilenceRejection:
    """Silence and noise must never produce a frequency."""

    @pytest.fixture
    def detector(self):
        return PitchDetector()

    def test_all_zero(self, detector):
        estimate = detector.estimate(np.zeros(WINDOW, dtype=np.float32), SR)
        assert estimate.frequency is None
        assert not estimate.is_voiced

    def test_below_noise_floor(self, detector):
        quiet = generate_sine_wave(220.0, amplitude=0.005)
        assert mean_amplitude(quiet) < detector.noise_floor
        assert detector.detect(quiet, SR) is None

    def test_white_noise(self, detector):
        rng = np.random.default_rng(0)
        noise = (rng.standard_normal(WINDOW) * 0.3).astype(np.float32)
        estimate = detector.estimate(noise, SR)
        assert estimate.frequency is None
        assert estimate.amplitude > detector.noise_floor

    def test_above_range(self, detector):
        assert detector.detect(generate_sine_wave(1500.0), SR) is None

    def test_below_range(self, detector):
        assert detector.detect(generate_sine_wave(40.0), SR) is None


class TestPeriodicRecovery:
    """Periodic signals are recovered within a few percent."""

    @pytest.mark.parametrize("freq", [82.41, 110.0, 146.83, 196.0, 220.0, 246.94, 329.63, 880.0])
    def test_sine(self, freq):
        detected = PitchDetector().detect(generate_sine_wave(freq), SR)
        assert detected is not None
        assert detected == pytest.approx(freq, rel=0.02)

    @pytest.mark.parametrize("freq", [82.41, 110.0, 196.0])
    def test_harmonic_tone(self, freq):
        detected = PitchDetector().detect(generate_plucked_tone(freq), SR)
        assert detected == pytest.approx(freq, rel=0.02)

    def test_other_sample_rate(self):
        sine = generate_sine_wave(220.0, sr=48000)
        assert PitchDetector().detect(sine, 48000) == pytest.approx(220.0, rel=0.02)

    def test_unrefined_lag(self):
        detected = PitchDetector(refine=False).detect(generate_sine_wave(220.0), SR)
        # Nearest integer lag to the 200.45-sample period
        assert detected == pytest.approx(SR / 200, rel=1e-9)

    def test_clarity_reported(self):
        estimate = PitchDetector().estimate(generate_sine_wave(220.0), SR)
        assert estimate.clarity > 0.9
        assert estimate.amplitude == pytest.approx(0.5 * 2 / np.pi, rel=0.05)


class TestAutocorrelation:
    def test_zero_lag_is_one(self):
        nsdf = normalized_autocorrelation(generate_sine_wave(220.0))
        assert len(nsdf) == WINDOW // 2
        assert nsdf[0] == pytest.approx(1.0)
        assert np.all(np.abs(nsdf) <= 1.0 + 1e-9)

    def test_matches_direct_sum(self):
        rng = np.random.default_rng(1)
        buffer = rng.standard_normal(64)
        nsdf = normalized_autocorrelation(buffer)
        half = 32
        for lag in (0, 5, 17, 31):
            a, b = buffer[:half], buffer[lag : lag + half]
            expected = np.dot(a, b) / ((np.dot(a, a) + np.dot(b, b)) / 2)
            assert nsdf[lag] == pytest.approx(expected)

    def test_parabolic_interpolation(self):
        y = np.array([0.0, 1.0, 3.0, 4.0, 3.0, 1.0])
        assert parabolic_interpolation(y, 3) == pytest.approx(3.0)
        assert parabolic_interpolation(y, 0) == 0.0


class TestOfflineTracking:
    def test_two_note_sequence(self):
        first = generate_sine_wave(110.0, SR // 2)
        second = generate_sine_wave(164.81, SR // 2)
        audio = np.concatenate([first, second])

        times, estimates = track_pitch(audio, SR, hop_length=512)
        assert len(times) == len(estimates)

        segments = segment_notes(times, estimates, 512 / SR, min_duration=0.1)
        assert [s.note.label for s in segments] == ["A2", "E3"]
        assert segments[0].onset == pytest.approx(0.0)
        assert segments[1].onset == pytest.approx(0.5, abs=0.06)

    def test_short_audio(self):
        times, estimates = track_pitch(np.zeros(100, dtype=np.float32), SR)
        assert len(times) == 0
        assert estimates == []

    def test_silence_has_no_segments(self):
        times, estimates = track_pitch(np.zeros(SR, dtype=np.float32), SR)
        assert segment_notes(times, estimates, 512 / SR) == []
