"""Unit tests for the Retuner using the in-memory score models."""

import pytest

from harmonysnap.retuner import RetuneSettings, Retuner
from harmonysnap.score_models import Note, Score, Segment, tie


def test_strong_beat_snaps_to_chord_weak_beat_to_scale() -> None:
    on_beat, off_beat = Note(66), Note(66)
    score = Score([
        Segment(0, chord_symbols=["C"], notes=[on_beat]),
        Segment(240, notes=[off_beat]),
    ])

    Retuner().retune(score)

    assert on_beat.pitch == 67  # F# -> G, the nearest chord tone
    assert off_beat.pitch == 65  # F# -> F, the nearest scale tone


def test_notes_before_first_chord_are_untouched() -> None:
    early = Note(61)
    score = Score([Segment(0, notes=[early]), Segment(480, chord_symbols=["C"], notes=[Note(61)])])

    report = Retuner().retune(score)

    assert early.pitch == 61
    assert report.notes_without_chord == 1


def test_no_chord_region_is_untouched() -> None:
    under_c, after_nc, later, under_f = Note(61), Note(61), Note(61), Note(66)
    score = Score([
        Segment(0, chord_symbols=["C"], notes=[under_c]),
        Segment(480, chord_symbols=["N.C."], notes=[after_nc]),
        Segment(960, notes=[later]),
        Segment(1440, chord_symbols=["F"], notes=[under_f]),
    ])

    report = Retuner().retune(score)

    assert under_c.pitch == 60
    assert after_nc.pitch == 61
    assert later.pitch == 61
    assert under_f.pitch == 65
    assert report.notes_seen == 4
    assert report.notes_changed == 2
    assert report.notes_without_chord == 2


def test_tie_chain_takes_pitch_of_last_note() -> None:
    first, last = Note(66), Note(66)
    tie(first, last)
    score = Score([
        Segment(0, chord_symbols=["C"], notes=[first]),
        Segment(1920, measure_start=1920, chord_symbols=["F#"], notes=[last]),
    ])

    report = Retuner().retune(score)

    assert last.pitch == 66
    assert first.pitch == 66
    assert first.tpc1 == last.tpc1 == 20
    assert report.tied_notes_repitched == 1


def test_three_note_tie_chain_is_unified() -> None:
    a, b, c = Note(61), Note(61), Note(61)
    tie(a, b, c)
    score = Score([
        Segment(0, chord_symbols=["C"], notes=[a]),
        Segment(480, chord_symbols=["Db"], notes=[b]),
        Segment(960, chord_symbols=["F"], notes=[c]),
    ])

    Retuner().retune(score)

    assert a.pitch == b.pitch == c.pitch == 60


def test_bass_only_symbol_reuses_previous_root() -> None:
    note = Note(54)
    score = Score([
        Segment(0, chord_symbols=["F"], notes=[Note(65)]),
        Segment(480, chord_symbols=["/B"], notes=[note]),
    ])

    Retuner().retune(score)

    # F major over B: F# snaps down to F rather than up to G.
    assert note.pitch == 53


def test_previous_root_does_not_leak_between_passes() -> None:
    retuner = Retuner()
    retuner.retune(Score([
        Segment(0, chord_symbols=["F"], notes=[Note(65)]),
        Segment(480, chord_symbols=["/B"], notes=[Note(54)]),
    ]))

    note = Note(54)
    retuner.retune(Score([Segment(0, chord_symbols=["/B"], notes=[note])]))

    # With no earlier chord the root defaults to C: C major over B.
    assert note.pitch == 55


def test_time_signature_denominator_defines_beats() -> None:
    note = Note(66)
    score = Score([Segment(240, time_signature=(6, 8), chord_symbols=["C"], notes=[note])])

    Retuner().retune(score)

    assert note.pitch == 67


def test_settings_choose_target_sets() -> None:
    note = Note(66)
    score = Score([Segment(240, chord_symbols=["C"], notes=[note])])

    Retuner(RetuneSettings(weak_beat_source="chord")).retune(score)

    assert note.pitch == 67


def test_settings_without_bass() -> None:
    with_bass, without_bass = Note(53), Note(53)
    Retuner().retune(Score([Segment(0, chord_symbols=["C/F"], notes=[with_bass])]))
    Retuner(RetuneSettings(include_bass=False)).retune(
        Score([Segment(0, chord_symbols=["C/F"], notes=[without_bass])])
    )

    assert with_bass.pitch == 53
    assert without_bass.pitch == 52


def test_settings_reject_unknown_source() -> None:
    with pytest.raises(ValueError, match="strong_beat_source"):
        RetuneSettings(strong_beat_source="arpeggio")


def test_unparseable_symbol_still_retunes(caplog: pytest.LogCaptureFixture) -> None:
    note = Note(61)
    score = Score([Segment(0, chord_symbols=["C??"], notes=[note, Note(62)])])

    Retuner().retune(score)

    assert note.pitch == 60
    assert caplog.text.count("C??") == 1


def test_tie_chain_ending_under_no_chord_stays_whole() -> None:
    first, last = Note(61), Note(61)
    tie(first, last)
    score = Score([
        Segment(0, chord_symbols=["C"], notes=[first]),
        Segment(1920, measure_start=1920, chord_symbols=["N.C."], notes=[last]),
    ])

    report = Retuner().retune(score)

    assert last.pitch == 61
    assert first.pitch == last.pitch
    assert first.tpc1 == last.tpc1
    assert report.notes_without_chord == 1
    assert report.tied_notes_repitched == 1


@pytest.mark.parametrize("symbol", ["Cadd15", "C7#14", "Cadd0", "C7(no3)add16"])
def test_unvoiceable_degrees_do_not_stop_the_pass(symbol: str) -> None:
    note, later = Note(61), Note(61)
    score = Score([
        Segment(0, chord_symbols=[symbol], notes=[note]),
        Segment(1920, measure_start=1920, chord_symbols=["Db"], notes=[later]),
    ])

    report = Retuner().retune(score)

    assert note.pitch == 60
    assert later.pitch == 61
    assert report.notes_seen == 2
