"""Snap engine: nearest pitch-class search, beat strength and tie-chain repitching."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from harmonysnap.logger_config import logger
from harmonysnap.pitch_utils import SEMITONES_PER_OCTAVE, spell_pitch
from harmonysnap.score_models import HostNote, ScoreHost

WHOLE_NOTE_TICKS = 1920

#: Upper bound on tie-chain walks; real chains are a handful of notes long.
MAX_TIE_CHAIN = 1024


def nearest_pitch_class(note_pitch: int, target_pitches: Sequence[int]) -> int:
    """
    Move ``note_pitch`` by the smallest interval that lands on a target pitch class.

    For every target, in order, the ascending interval (0..11) and the
    matching descending interval (-12..-1) are candidates. The first
    candidate with the smallest magnitude wins, so ties favour the earlier
    target and, for one target, the upward move. An empty target list
    leaves the pitch unchanged.

    E.g. C#4 (61) against C major [60, 64, 67] -> 60.
    """
    if len(target_pitches) == 0:
        return note_pitch

    ascending = (np.asarray(target_pitches, dtype=int) - note_pitch) % SEMITONES_PER_OCTAVE
    descending = ascending - SEMITONES_PER_OCTAVE
    candidates = np.column_stack((ascending, descending)).ravel()

    # argmin returns the first index of the minimum.
    return note_pitch + int(candidates[np.argmin(np.abs(candidates))])


def is_strong_beat(
    position: int,
    measure_start: int,
    denominator: int,
    whole_note_ticks: int = WHOLE_NOTE_TICKS,
) -> bool:
    """True when ``position`` falls on a beat of the time signature's denominator."""
    beat_duration = whole_note_ticks / denominator
    return (position - measure_start) % beat_duration == 0


def alter_pitch_of_note(note: HostNote, new_pitch: int) -> None:
    """
    Set a note's pitch and respell it from the fixed spelling table.

    The gap between the written and sounding spellings is kept, so a note
    of a transposing instrument stays transposed by the same amount.
    """
    transposition = note.tpc2 - note.tpc1
    note.pitch = new_pitch
    note.tpc1 = spell_pitch(new_pitch)
    note.tpc2 = note.tpc1 + transposition


def is_last_in_tie_chain(note: HostNote, host: ScoreHost) -> bool:
    """True for a note that is tied from an earlier note but not tied onward."""
    return host.tie_back_of(note) is not None and host.tie_forward_of(note) is None


def repitch_earlier_notes_in_tie_chain(note: HostNote, host: ScoreHost) -> int:
    """
    Copy ``note``'s pitch and spelling onto every earlier note of its tie chain.

    Returns:
        The number of notes rewritten.
    """
    count = 0
    current = host.tie_back_of(note)
    while current is not None:
        if count >= MAX_TIE_CHAIN:
            logger.warning("Tie chain longer than %d notes; stopped repitching", MAX_TIE_CHAIN)
            break
        current.pitch = note.pitch
        current.tpc1 = note.tpc1
        current.tpc2 = note.tpc2
        count += 1
        current = host.tie_back_of(current)
    return count
