"""Command-line interface for fretlab.

Provides commands for:
- tune: Live microphone tuner
- analyze: Detect notes in a recording
- play: Play or render a note
- metronome: Accented click track
- note: Nearest note for a frequency
- fretboard: Print the fretboard
"""

import asyncio
import json
import time
from pathlib import Path
from typing import Optional, List

import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

app = typer.Typer(
    name="fretlab",
    help="Guitar tuner, tone player and fretboard tools",
    rich_markup_mode="markdown",
)
console = Console()

STATUS_STYLES = {
    "in_tune": ("In tune", "green"),
    "too_low": ("Tune higher", "blue"),
    "too_high": ("Tune lower", "red"),
}


def _render_reading(reading) -> Text:
    """One-line tuner display."""
    from .theory import string_label

    if reading is None or reading.note is None:
        return Text("--  play a string", style="dim")

    note = reading.note
    label, color = STATUS_STYLES[reading.status]
    # 21-character needle, 5 cents per step
    needle = ["-"] * 21
    needle[10] = "|"
    needle[max(0, min(20, 10 + round(note.cents / 5)))] = "^"

    text = Text()
    text.append(f"{note.label:<4}", style=f"bold {color}" if reading.stable else "bold")
    text.append(f" {reading.estimate.frequency:7.2f} Hz ")
    text.append(f"{note.cents:+3d} cents ")
    text.append("".join(needle), style=color)
    if reading.stable:
        text.append(f"  {label}", style=color)
    if reading.string_index is not None:
        text.append(f"  (string {string_label(reading.string_index)})", style="dim")
    return text


@app.command()
def tune(
    duration: float = typer.Option(
        0.0, "-d", "--duration", help="Stop after this many seconds. 0 = until Ctrl-C"
    ),
    sample_rate: int = typer.Option(44100, "--sr", help="Capture sample rate"),
    window_size: int = typer.Option(
        2048, "-w", "--window", help="Samples per analysis window (power of two)"
    ),
    input_device: Optional[str] = typer.Option(
        None, "--input-device", help="sounddevice input device name or index"
    ),
):
    """Listen to the microphone and show the nearest note and cents offset.

    **Examples:**

        fretlab tune

        fretlab tune -d 30 --sr 48000
    """
    from .audio import AudioDevice

    device = AudioDevice(sample_rate=sample_rate, input_device=_device_id(input_device))
    try:
        code = asyncio.run(_run_tuner(device, duration, window_size))
    except KeyboardInterrupt:
        code = 0
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        code = 1
    finally:
        device.close()
    if code:
        raise typer.Exit(code)


async def _run_tuner(device, duration: float, window_size: int) -> int:
    from .scheduling import AsyncioScheduler
    from .tuner import PitchTracker, TuningMonitor

    errors: List[Exception] = []
    stopped = asyncio.Event()

    def on_error(error):
        errors.append(error)
        stopped.set()

    with Live(_render_reading(None), console=console, refresh_per_second=20) as live:
        monitor = TuningMonitor(on_reading=lambda reading: live.update(_render_reading(reading)))
        tracker = PitchTracker(
            device,
            AsyncioScheduler(),
            on_estimate=monitor,
            on_error=on_error,
            window_size=window_size,
        )
        await tracker.start_listening()
        try:
            if tracker.is_listening:
                await asyncio.wait_for(stopped.wait(), timeout=duration or None)
        except asyncio.TimeoutError:
            pass
        finally:
            tracker.stop_listening()

    if errors:
        console.print(f"[red]Error: {errors[0]}[/red]")
        return 1
    return 0


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    window_size: int = typer.Option(2048, "-w", "--window", help="Samples per analysis window"),
    hop_length: int = typer.Option(512, "--hop", help="Samples between windows"),
    min_duration: float = typer.Option(
        0.1, "--min-duration", help="Minimum note duration in seconds"
    ),
    noise_floor: float = typer.Option(0.01, "--noise-floor", help="Mean amplitude gate"),
    clarity: float = typer.Option(0.9, "--clarity", help="Correlation acceptance threshold"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Detect the notes played in a recording.

    Useful for checking the detector thresholds against real guitar takes.
    """
    from .input import AudioLoader
    from .analysis import PitchDetector, track_pitch, segment_notes

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    loader = AudioLoader(min_samples=window_size)
    try:
        audio, sr = loader.load(str(input_file))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    detector = PitchDetector(noise_floor=noise_floor, clarity_threshold=clarity)
    times, estimates = track_pitch(audio, sr, detector, window_size, hop_length)
    segments = segment_notes(times, estimates, hop_length / sr, min_duration)

    if json_output:
        result = {
            "file": str(input_file),
            "duration": loader.get_duration(audio, sr),
            "voiced_frames": sum(1 for e in estimates if e.is_voiced),
            "frames": len(estimates),
            "notes": [
                {
                    "note": s.note.label,
                    "cents": s.note.cents,
                    "frequency": round(s.frequency, 2),
                    "onset": round(s.onset, 3),
                    "offset": round(s.offset, 3),
                }
                for s in segments
            ],
        }
        print(json.dumps(result, indent=2))
        return

    console.print(f"\n[bold]Audio:[/bold] {input_file.name}")
    console.print(f"  Duration: {loader.get_duration(audio, sr):.2f} seconds")
    voiced = sum(1 for e in estimates if e.is_voiced)
    console.print(f"  Voiced frames: {voiced}/{len(estimates)}")
    _show_segments_table(segments)


def _show_segments_table(segments):
    """Display note segments in a table."""
    table = Table(title="Detected Notes")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="green")
    table.add_column("Cents", style="yellow")
    table.add_column("Onset (s)", style="magenta")
    table.add_column("Duration (s)", style="magenta")

    for segment in segments:
        table.add_row(
            segment.note.label,
            f"{segment.frequency:.2f}",
            f"{segment.note.cents:+d}",
            f"{segment.onset:.3f}",
            f"{segment.duration:.3f}",
        )

    console.print(table)


@app.command()
def play(
    note: Optional[str] = typer.Argument(None, help="Note with octave, e.g. A4 or C#3"),
    string: Optional[int] = typer.Option(
        None, "-s", "--string", help="String index, 0 = low E"
    ),
    fret: int = typer.Option(0, "-f", "--fret", help="Fret number when --string is given"),
    duration: int = typer.Option(2000, "-d", "--duration", help="Tone length in ms"),
    waveform: str = typer.Option("triangle", "--waveform", help="triangle/sine/square/sawtooth"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write a WAV file instead of playing"
    ),
):
    """Play a note by name or by string and fret.

    **Examples:**

        fretlab play A4

        fretlab play --string 0 --fret 5

        fretlab play E2 -o low_e.wav
    """
    from .core.constants import STANDARD_TUNING, MAX_FRET, WAVEFORMS
    from .theory import parse_note, frequency_of, fretted_frequency

    if waveform not in WAVEFORMS:
        console.print(f"[red]Error: Unknown waveform '{waveform}'. Use one of {WAVEFORMS}[/red]")
        raise typer.Exit(1)

    try:
        if string is not None:
            if not 0 <= string < len(STANDARD_TUNING) or not 0 <= fret <= MAX_FRET:
                raise ValueError(f"String must be 0-5 and fret 0-{MAX_FRET}")
            name, octave = STANDARD_TUNING[string]
            frequency = fretted_frequency(name, octave, fret)
        elif note is not None:
            frequency = frequency_of(*parse_note(note))
        else:
            raise ValueError("Give a note (e.g. A4) or --string/--fret")
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[blue]Frequency:[/blue] {frequency:.2f} Hz")

    if output is not None:
        _write_tone(output, frequency, duration, waveform)
        return

    from .audio import AudioDevice, ToneSynthesizer

    device = AudioDevice()
    synth = ToneSynthesizer(device)
    try:
        if synth.play(frequency, duration, waveform) is None:
            console.print("[red]Error: Could not play tone[/red]")
            raise typer.Exit(1)
        # Keep the process alive until the mixer has dropped the tone
        deadline = time.monotonic() + duration / 1000.0 + 1.0
        while synth.active_tones and time.monotonic() < deadline:
            time.sleep(0.05)
    finally:
        device.close()


def _write_tone(output: Path, frequency: float, duration: int, waveform: str) -> None:
    """Render a tone to a WAV file."""
    import soundfile as sf
    from .audio import render_tone
    from .core import ToneRequest
    from .core.constants import DEFAULT_SR

    request = ToneRequest(
        frequency=frequency, start_time=0.0, duration_ms=duration, waveform=waveform
    )
    try:
        samples = render_tone(request, DEFAULT_SR)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    sf.write(str(output), samples, DEFAULT_SR)
    console.print(f"[green]Wrote[/green] {output} ({len(samples) / DEFAULT_SR:.2f}s)")


@app.command()
def metronome(
    bpm: float = typer.Option(80, "-b", "--bpm", help="Tempo (30-250)"),
    beats: int = typer.Option(4, "--beats", help="Beats per measure (2-8)"),
    duration: float = typer.Option(
        0.0, "-d", "--duration", help="Stop after this many seconds. 0 = until Ctrl-C"
    ),
):
    """Play an accented click track."""
    from .audio import AudioDevice

    device = AudioDevice()
    try:
        asyncio.run(_run_metronome(device, bpm, beats, duration))
    except KeyboardInterrupt:
        pass
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        device.close()


async def _run_metronome(device, bpm: float, beats: int, duration: float) -> None:
    from .audio import ToneSynthesizer, Metronome
    from .scheduling import AsyncioScheduler

    def on_beat(beat: int) -> None:
        marks = " ".join("●" if i == beat else "○" for i in range(beats))
        style = "bold magenta" if beat == 0 else "cyan"
        console.print(marks, style=style)

    click = Metronome(
        ToneSynthesizer(device), AsyncioScheduler(), bpm=bpm, beats_per_measure=beats, on_beat=on_beat
    )
    if click.bpm != bpm:
        console.print(f"[yellow]Tempo clamped to {click.bpm:g} BPM[/yellow]")
    click.start()
    try:
        if duration > 0:
            await asyncio.sleep(duration)
        else:
            await asyncio.Event().wait()
    finally:
        click.stop()


@app.command()
def note(
    frequency: float = typer.Argument(..., help="Frequency in Hz"),
):
    """Show the nearest note and cents deviation for a frequency."""
    from .theory import note_of, nearest_string, string_label

    try:
        result = note_of(frequency)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    index, cents = nearest_string(frequency)
    console.print(f"[bold]{result.label}[/bold] {result.cents:+d} cents (MIDI {result.midi})")
    console.print(f"  Nearest open string: {string_label(index)} ({cents:+.1f} cents)")


@app.command()
def fretboard(
    frets: int = typer.Option(12, "-f", "--frets", help="Number of frets to show"),
    root: Optional[str] = typer.Option(
        None, "-r", "--root", help="Show intervals relative to this root note"
    ),
):
    """Print the notes on every string and fret in standard tuning."""
    from .core.constants import STANDARD_TUNING, MAX_FRET
    from .theory import fretboard_notes, interval_name, pitch_class

    if not 0 <= frets <= MAX_FRET:
        console.print(f"[red]Error: frets must be 0-{MAX_FRET}[/red]")
        raise typer.Exit(1)
    if root is not None:
        try:
            pitch_class(root)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    names = [name for name, _ in STANDARD_TUNING]
    rows = fretboard_notes(names, frets)

    table = Table(title="Fretboard" if root is None else f"Intervals from {root}")
    table.add_column("String", style="bold")
    for fret_number in range(frets + 1):
        table.add_column(str(fret_number), justify="center")

    # High string on top, as seen by the player
    for (name, octave), row in reversed(list(zip(STANDARD_TUNING, rows))):
        cells = [interval_name(n, root) if root else n for n in row]
        table.add_row(f"{name}{octave}", *cells)

    console.print(table)


def _device_id(value: Optional[str]):
    """sounddevice accepts either an index or a name substring."""
    if value is not None and value.isdigit():
        return int(value)
    return value


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
