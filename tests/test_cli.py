"""Tests for the loader and command-line interface."""

import json

import numpy as np
import pytest
import soundfile as sf
from typer.testing import CliRunner

from fretlab.cli import app
from fretlab.input import AudioLoader

runner = CliRunner()
SR = 44100


def write_sine(path, freq: float, duration: float, amplitude: float = 0.3):
    t = np.arange(int(SR * duration)) / SR
    sf.write(str(path), (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32), SR)


class TestAudioLoader:
    def test_removes_dc_offset(self, tmp_path):
        path = tmp_path / "offset.wav"
        t = np.arange(SR // 2) / SR
        sf.write(str(path), (0.2 + 0.1 * np.sin(2 * np.pi * 220.0 * t)).astype(np.float32), SR)

        audio, _ = AudioLoader().load(str(path))

        assert abs(np.mean(audio)) < 1e-3
        assert np.abs(audio).max() == pytest.approx(1.0)

    def test_resamples_to_target_rate(self, tmp_path):
        path = tmp_path / "a3_48k.wav"
        t = np.arange(48000) / 48000
        sf.write(str(path), (0.3 * np.sin(2 * np.pi * 220.0 * t)).astype(np.float32), 48000)

        audio, sr = AudioLoader().load(str(path))

        assert sr == SR
        assert len(audio) == pytest.approx(SR, abs=2)

    def test_rejects_clip_shorter_than_window(self, tmp_path):
        path = tmp_path / "click.wav"
        write_sine(path, 220.0, 0.02)

        with pytest.raises(ValueError, match="too short"):
            AudioLoader(min_samples=2048).load(str(path))

    def test_unsupported_format(self, tmp_path):
        dummy_file = tmp_path / "test.xyz"
        dummy_file.write_text("dummy content")

        loader = AudioLoader()
        with pytest.raises(ValueError, match="Unsupported format"):
            loader.load(str(dummy_file))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AudioLoader().load(str(tmp_path / "missing.wav"))

    def test_load_wav(self, tmp_path):
        path = tmp_path / "a3.wav"
        write_sine(path, 220.0, 1.0)

        loader = AudioLoader()
        audio, sr = loader.load(str(path))

        assert sr == SR
        assert loader.get_duration(audio, sr) == pytest.approx(1.0, rel=0.01)
        assert np.abs(audio).max() == pytest.approx(1.0)


class TestCLI:
    def test_note(self):
        result = runner.invoke(app, ["note", "440"])
        assert result.exit_code == 0
        assert "A4" in result.output
        assert "MIDI 69" in result.output

    def test_note_invalid(self):
        result = runner.invoke(app, ["note", "--", "-5"])
        assert result.exit_code == 1

    def test_play_to_wav(self, tmp_path):
        output = tmp_path / "e2.wav"
        result = runner.invoke(app, ["play", "E2", "-d", "500", "-o", str(output)])
        assert result.exit_code == 0
        audio, sr = sf.read(str(output))
        assert sr == SR
        assert len(audio) == SR // 2

    def test_play_string_and_fret_to_wav(self, tmp_path):
        output = tmp_path / "d3.wav"
        result = runner.invoke(app, ["play", "-s", "1", "-f", "5", "-o", str(output)])
        assert result.exit_code == 0
        assert "146.83" in result.output

    def test_play_bad_note(self, tmp_path):
        result = runner.invoke(app, ["play", "H2", "-o", str(tmp_path / "x.wav")])
        assert result.exit_code == 1

    def test_play_bad_waveform(self, tmp_path):
        result = runner.invoke(app, ["play", "A4", "--waveform", "organ", "-o", str(tmp_path / "x.wav")])
        assert result.exit_code == 1

    def test_fretboard(self):
        result = runner.invoke(app, ["fretboard", "-f", "5"])
        assert result.exit_code == 0
        assert "E2" in result.output
        assert "A#" in result.output

    def test_fretboard_intervals(self):
        result = runner.invoke(app, ["fretboard", "-f", "3", "-r", "E"])
        assert result.exit_code == 0
        assert "P4" in result.output

    def test_analyze_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1

    def test_analyze_json(self, tmp_path):
        path = tmp_path / "a2.wav"
        write_sine(path, 110.0, 1.0)

        result = runner.invoke(app, ["analyze", str(path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [n["note"] for n in data["notes"]] == ["A2"]
        assert data["voiced_frames"] > 0

    def test_analyze_too_short(self, tmp_path):
        path = tmp_path / "click.wav"
        write_sine(path, 220.0, 0.02)

        result = runner.invoke(app, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "too short" in result.output

    def test_tune_invalid_window(self):
        result = runner.invoke(app, ["tune", "-w", "1000"])
        assert result.exit_code == 1
        assert "power of two" in result.output
