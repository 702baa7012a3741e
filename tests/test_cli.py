"""Tests for the click command line interface."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from harmonysnap import __version__
from harmonysnap.cli import main


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_chord_command_shows_tones_and_scale() -> None:
    result = CliRunner().invoke(main, ["chord", "Cm7"])
    assert result.exit_code == 0
    assert "Quality : minor" in result.output
    assert "Tones   : 1 b3 5 b7" in result.output
    assert "Scale   : 1 2 b3 4 5 b6 b7" in result.output
    assert "C3(48) Eb3(51) G3(55) Bb3(58)" in result.output


def test_chord_command_condensed_voicing() -> None:
    result = CliRunner().invoke(main, ["chord", "C7", "--condensed"])
    assert result.exit_code == 0
    assert "C3(48) G3(55) Bb3(58) C4(60) E4(64)" in result.output


def test_chord_command_slash_bass() -> None:
    result = CliRunner().invoke(main, ["chord", "C/E"])
    assert result.exit_code == 0
    assert "Bass    : E" in result.output
    assert "E2(40) C3(48)" in result.output


def test_chord_command_no_chord() -> None:
    result = CliRunner().invoke(main, ["chord", "N.C."])
    assert result.exit_code == 0
    assert "no chord" in result.output


def test_retune_requires_existing_file() -> None:
    result = CliRunner().invoke(main, ["retune", "does-not-exist.musicxml"])
    assert result.exit_code != 0


def test_chord_command_labels_scale_pitches() -> None:
    result = CliRunner().invoke(main, ["chord", "C"])
    assert result.exit_code == 0
    assert "Voicing : C3(48) E3(52) G3(55)" in result.output
    assert "Scale pitches : C3(48) D3(50) E3(52) F3(53) G3(55) A3(57) B3(59)" in result.output


def test_chord_command_out_of_range_degree() -> None:
    result = CliRunner().invoke(main, ["chord", "Cadd15"])
    assert result.exit_code == 0
    assert "C3(48) E3(52) G3(55)" in result.output


@pytest.mark.integration
def test_retune_writes_default_output_and_midi(flat_lead_sheet: Path, tmp_path: Path) -> None:
    from music21 import converter, note

    midi_path = tmp_path / "retuned.mid"
    result = CliRunner().invoke(main, ["retune", str(flat_lead_sheet), "--midi", str(midi_path)])
    assert result.exit_code == 0, result.output

    output_path = tmp_path / "lead_sheet_retuned.musicxml"
    assert output_path.exists()
    assert midi_path.read_bytes()[:4] == b"MThd"

    retuned = converter.parse(str(output_path))
    assert [n.pitch.midi for n in retuned.recurse().getElementsByClass(note.Note)] == [70, 63]


@pytest.mark.integration
def test_retune_options(flat_lead_sheet: Path, tmp_path: Path) -> None:
    from music21 import converter, note

    output_path = tmp_path / "fitted.musicxml"
    result = CliRunner().invoke(
        main,
        ["retune", str(flat_lead_sheet), "-o", str(output_path), "--strong", "chord", "--weak", "chord", "--no-bass"],
    )
    assert result.exit_code == 0, result.output
    assert "2 of 2 note(s) changed" in result.output

    retuned = converter.parse(str(output_path))
    assert [n.pitch.midi for n in retuned.recurse().getElementsByClass(note.Note)] == [70, 63]


def test_retune_rejects_unknown_target_source(flat_lead_sheet: Path) -> None:
    result = CliRunner().invoke(main, ["retune", str(flat_lead_sheet), "--strong", "arpeggio"])
    assert result.exit_code != 0
