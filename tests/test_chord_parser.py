"""Unit tests for ChordSymbolParser."""

import logging

import pytest

from harmonysnap.chord_models import Alteration, NoteName
from harmonysnap.chord_parser import ChordSymbolParser, is_no_chord, parse_chord_symbol


def test_parse_root_quality_and_extension() -> None:
    spec = parse_chord_symbol("Cm7b9")
    assert spec.root == NoteName("C")
    assert spec.minor
    assert spec.extension == 7
    assert spec.alterations == (Alteration(degree=9, flat=True),)


def test_parse_suspension_and_slash_bass() -> None:
    spec = parse_chord_symbol("F#sus4/A")
    assert spec.root == NoteName("F", sharp=True)
    assert spec.suspensions == (4,)
    assert spec.bass == NoteName("A")


def test_parse_flat_root_with_major_token() -> None:
    spec = parse_chord_symbol("Bbmaj7")
    assert spec.root == NoteName("B", flat=True)
    assert spec.major
    assert spec.extension == 7


def test_parse_lowercase_root() -> None:
    spec = parse_chord_symbol("eb7")
    assert spec.root == NoteName("e", flat=True)
    assert spec.root.name == "Eb"


@pytest.mark.parametrize(
    ("symbol", "quality"),
    [
        ("C", "dominant"),
        ("C7", "dominant"),
        ("CMaj7", "major"),
        ("CM7", "major"),
        ("Cmi7", "minor"),
        ("C-7", "minor"),
        ("C−7", "minor"),
        ("Cdim", "diminished"),
        ("Co7", "diminished"),
        ("C°", "diminished"),
        ("Cø7", "half-diminished"),
        ("C07", "half-diminished"),
        ("Caug", "augmented"),
        ("C+", "augmented"),
    ],
)
def test_parse_quality_tokens(symbol: str, quality: str) -> None:
    assert parse_chord_symbol(symbol).quality == quality


@pytest.mark.parametrize("symbol", ["CΔ", "C∆7", "C^7", "Ct7"])
def test_parse_triangle_tokens(symbol: str) -> None:
    spec = parse_chord_symbol(symbol)
    assert spec.triangle
    assert spec.quality == "dominant"


def test_front_69_sets_six_nine_not_extension() -> None:
    spec = parse_chord_symbol("C69")
    assert spec.six_nine
    assert spec.extension is None


@pytest.mark.parametrize("symbol", ["C(6/9)", "C(6-9)", "C(6+9)", "Cm(69)"])
def test_middle_six_nine_tokens(symbol: str) -> None:
    spec = parse_chord_symbol(symbol)
    assert spec.six_nine
    assert spec.additions == ()


def test_middle_major_number_captures_major_alt() -> None:
    spec = parse_chord_symbol("Cm(maj7)")
    assert spec.minor
    assert spec.major_alt == 7


def test_middle_tokens_in_order() -> None:
    spec = parse_chord_symbol("C7sus2add13no5alt")
    assert spec.suspensions == (2,)
    assert spec.additions == (13,)
    assert spec.drops == (5,)
    assert spec.alt


def test_sus_without_number_defaults_to_fourth() -> None:
    assert parse_chord_symbol("Csus").suspensions == (4,)


def test_sus_takes_a_single_digit() -> None:
    spec = parse_chord_symbol("Csus24")
    assert spec.suspensions == (2,)
    assert spec.additions == (4,)


def test_bare_number_mid_symbol_is_an_added_tone() -> None:
    spec = parse_chord_symbol("C7sus413")
    assert spec.extension == 7
    assert spec.suspensions == (4,)
    assert spec.additions == (13,)


def test_alterations_keep_symbol_order() -> None:
    spec = parse_chord_symbol("C7b9#9")
    assert [a.degree for a in spec.alterations] == [9, 9]
    assert [a.value for a in spec.alterations] == [-1, 1]


def test_alteration_with_both_accidentals_is_sharp() -> None:
    (alteration,) = parse_chord_symbol("C7#b5").alterations
    assert alteration.value == 1


def test_whole_symbol_parentheses_are_stripped() -> None:
    spec = parse_chord_symbol("(Cm7)")
    assert spec.root == NoteName("C")
    assert spec.minor
    assert spec.extension == 7


def test_parenthesised_extras_use_middle_grammar() -> None:
    spec = parse_chord_symbol("C7(b9)(#11)/E")
    assert [(a.degree, a.value) for a in spec.alterations] == [(9, -1), (11, 1)]
    assert spec.bass == NoteName("E")


def test_bass_only_symbol_has_no_root() -> None:
    spec = parse_chord_symbol("/Bb")
    assert spec.root is None
    assert spec.bass == NoteName("B", flat=True)


def test_unparsed_text_is_dropped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="harmonysnap"):
        spec = parse_chord_symbol("C6/9")
    assert spec.extension == 6
    assert spec.bass is None
    assert "C6/9" in caplog.text


def test_unparsed_extra_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="harmonysnap"):
        spec = parse_chord_symbol("C7(b9,#11)")
    assert [a.degree for a in spec.alterations] == [9]
    assert "#11" in caplog.text


def test_fully_parsed_symbol_logs_nothing(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="harmonysnap"):
        ChordSymbolParser().parse("Ebmaj7#11/G")
    assert caplog.records == []


def test_spec_is_immutable() -> None:
    spec = parse_chord_symbol("C7")
    with pytest.raises(AttributeError):
        spec.minor = True  # type: ignore[misc]


@pytest.mark.parametrize("text", ["N.C.", "NC", " n.c. ", None])
def test_is_no_chord(text: str | None) -> None:
    assert is_no_chord(text)


def test_real_symbol_is_not_no_chord() -> None:
    assert not is_no_chord("C")
