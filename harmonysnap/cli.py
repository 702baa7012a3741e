"""HarmonySnap CLI entry point."""

import sys
from pathlib import Path

import click

from harmonysnap import __version__
from harmonysnap.chord_expander import expand_chord_spec
from harmonysnap.chord_parser import is_no_chord, parse_chord_symbol
from harmonysnap.logger_config import set_verbose
from harmonysnap.pitch_utils import pitch_name
from harmonysnap.retuner import TARGET_SOURCES, RetuneSettings, Retuner
from harmonysnap.scale_deriver import scale_for_chord
from harmonysnap.voicing_strategy import CondensedVoicer, RawVoicer, VoicingStrategy, add_bass, render


def _format_degrees(pitch_map: dict[int, int]) -> str:
    """Format a PitchClassMap as e.g. '1 b3 5 b7'."""
    marks = {-2: "bb", -1: "b", 0: "", 1: "#"}
    return " ".join(f"{marks[alteration]}{degree}" for degree, alteration in pitch_map.items())


def _format_pitches(pitches: list[int]) -> str:
    return " ".join(f"{pitch_name(p)}({p})" for p in pitches)


def _default_output(input_path: str) -> str:
    path = Path(input_path)
    return str(path.with_name(f"{path.stem}_retuned.musicxml"))


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="harmonysnap")
def main() -> None:
    """HarmonySnap: retune melodies to the chord symbols of a lead sheet."""


# ── chord subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("symbol")
@click.option(
    "--condensed",
    is_flag=True,
    default=False,
    help="Show the condensed playback voicing (at most 4 tones plus bass) instead of every chord tone.",
)
def chord(symbol: str, condensed: bool) -> None:
    """
    Show how a chord symbol is read: tones, derived scale and MIDI pitches.

    \b
    Examples:
      harmonysnap chord Cm7b9
      harmonysnap chord "F#sus4/A"
      harmonysnap chord "C13(#11)" --condensed
    """
    if is_no_chord(symbol):
        click.echo(f"{symbol}: no chord")
        return

    spec = parse_chord_symbol(symbol)
    voicer: VoicingStrategy = CondensedVoicer() if condensed else RawVoicer()
    voiced = voicer.voice(spec)
    scale_map = scale_for_chord(spec)
    scale_pitches = add_bass(spec, voiced.root, render(scale_map, voiced.root))

    click.echo(f"Symbol   : {symbol}")
    click.echo(f"  Root    : {voiced.root.name}")
    click.echo(f"  Quality : {spec.quality}")
    if spec.bass is not None:
        click.echo(f"  Bass    : {spec.bass.name}")
    click.echo(f"  Tones   : {_format_degrees(expand_chord_spec(spec))}")
    click.echo(f"  Scale   : {_format_degrees(scale_map)}")
    click.echo(f"  Voicing : {_format_pitches(voiced.pitches)}")
    click.echo(f"  Scale pitches : {_format_pitches(scale_pitches)}")


# ── retune subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination MusicXML path. Defaults to <input-stem>_retuned.musicxml.",
)
@click.option(
    "--midi",
    "midi_output",
    default=None,
    metavar="PATH",
    help="Also write the retuned melody as a MIDI file.",
)
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=100,
    show_default=True,
    help="Playback tempo in BPM for --midi.",
)
@click.option(
    "--strong",
    type=click.Choice(sorted(TARGET_SOURCES), case_sensitive=False),
    default="chord",
    show_default=True,
    help="Target set for notes on a beat.",
)
@click.option(
    "--weak",
    type=click.Choice(sorted(TARGET_SOURCES), case_sensitive=False),
    default="scale",
    show_default=True,
    help="Target set for notes between beats.",
)
@click.option("--no-bass", is_flag=True, default=False, help="Leave the chord's bass note out of the target sets.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every chord and every snapped note.")
def retune(
    input_file: str,
    output: str | None,
    midi_output: str | None,
    tempo: int,
    strong: str,
    weak: str,
    no_bass: bool,
    verbose: bool,
) -> None:
    """
    Snap the notes of a score to its chord symbols and save the result.

    INPUT_FILE is a MusicXML file (or anything music21 can read) with
    chord symbols. Notes on a beat move to the nearest chord tone, other
    notes to the nearest tone of the chord's scale. Notes under "N.C."
    are left alone.

    \b
    Examples:
      harmonysnap retune tune.musicxml
      harmonysnap retune tune.musicxml -o fitted.musicxml --midi fitted.mid
      harmonysnap retune tune.musicxml --weak chord --no-bass
    """
    from harmonysnap.midi_exporter import MidiExporter
    from harmonysnap.music21_host import Music21Host

    set_verbose(verbose)
    resolved_output = output if output is not None else _default_output(input_file)
    settings = RetuneSettings(
        strong_beat_source=strong.lower(),
        weak_beat_source=weak.lower(),
        include_bass=not no_bass,
    )

    click.echo(f"harmonysnap v{__version__}")
    click.echo(f"  Input  : {input_file}")
    click.echo(f"  Output : {resolved_output}")
    click.echo()

    click.echo("[1/3] Reading score with music21...")
    try:
        host = Music21Host.load(input_file)
    except (OSError, ValueError) as exc:
        click.echo(f"  ERROR: Could not read score: {exc}", err=True)
        sys.exit(1)

    click.echo("[2/3] Retuning notes...")
    report = Retuner(settings).retune(host)
    click.echo(
        f"      {report.notes_changed} of {report.notes_seen} note(s) changed, "
        f"{report.notes_without_chord} without a chord, "
        f"{report.tied_notes_repitched} tied note(s) aligned"
    )

    click.echo(f"[3/3] Writing MusicXML → '{resolved_output}'...")
    try:
        host.save(resolved_output)
        if midi_output is not None:
            click.echo(f"      Writing MIDI → '{midi_output}'...")
            MidiExporter(tempo=tempo).export(host.melody_events(), midi_output, host.part_names)
    except (OSError, ValueError) as exc:
        click.echo(f"  ERROR: Could not write output: {exc}", err=True)
        sys.exit(1)

    click.echo()
    click.echo(f"Done!  Open '{resolved_output}' in MuseScore or any MusicXML editor.")
