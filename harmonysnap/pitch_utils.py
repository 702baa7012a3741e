"""Pitch helpers: letter names, reference pitches and the fixed spelling table."""

from typing import Final

# ── MIDI constants ──────────────────────────────────────────────────────────
SEMITONES_PER_OCTAVE = 12
MIDDLE_C_MIDI = 60  # C4 in Scientific Pitch Notation

#: Chord roots are rendered in the octave below middle C (C3 = 48).
REFERENCE_PITCH = MIDDLE_C_MIDI - SEMITONES_PER_OCTAVE

#: Bass notes at or above E3 are dropped an octave, so the bass can reach
#: down to the E below the bass clef.
BASS_CEILING = REFERENCE_PITCH + 4

LETTER_TO_SEMITONE: Final[dict[str, int]] = {
    "C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11,
}

# Tonal pitch classes (TPC) count along the line of fifths: F=13, C=14,
# G=15, D=16, A=17, E=18, B=19, and every sharp adds 7.
_TPC_LETTERS: Final[str] = "FCGDAEB"
_TPC_NATURAL: Final[dict[str, int]] = {"F": 13, "C": 14, "G": 15, "D": 16, "A": 17, "E": 18, "B": 19}

#: One spelling per pitch class. Not key-aware: the pitch between G and A
#: is always G#, the pitch between A and B is always Bb.
SPELLING_TABLE: Final[list[int]] = [
    14,  # C
    21,  # C#
    16,  # D
    11,  # Eb
    18,  # E
    13,  # F
    20,  # F#
    15,  # G
    22,  # G#
    17,  # A
    12,  # Bb
    19,  # B
]


def letter_to_semitone(letter: str, sharp: bool = False, flat: bool = False) -> int:
    """
    Return the interval above C (0-11) for a letter name and accidentals.

    Args:
        letter: A-G, either case.
        sharp:  Raise by one semitone.
        flat:   Lower by one semitone.
    """
    result = LETTER_TO_SEMITONE[letter.upper()]
    if flat:
        result -= 1
    if sharp:
        result += 1
    return result % SEMITONES_PER_OCTAVE


def letter_to_reference_pitch(letter: str, sharp: bool = False, flat: bool = False) -> int:
    """Return the MIDI pitch for a letter name in the octave starting at C3."""
    return REFERENCE_PITCH + letter_to_semitone(letter, sharp, flat)


def spell_pitch(pitch: int) -> int:
    """Return the tonal pitch class used to spell ``pitch``."""
    return SPELLING_TABLE[pitch % SEMITONES_PER_OCTAVE]


def tpc_to_name(tpc: int) -> str:
    """Convert a tonal pitch class to text, e.g. 11 -> 'Eb', 21 -> 'C#'."""
    letter = _TPC_LETTERS[(tpc + 1) % 7]
    alter = (tpc + 1) // 7 - 2
    accidental = "#" * alter if alter > 0 else "b" * -alter
    return f"{letter}{accidental}"


def name_to_tpc(letter: str, alter: int) -> int:
    """Inverse of :func:`tpc_to_name` for a letter and a semitone alteration."""
    return _TPC_NATURAL[letter.upper()] + 7 * alter


def pitch_name(pitch: int) -> str:
    """Human-readable name with octave, e.g. 63 -> 'Eb4'."""
    octave = pitch // SEMITONES_PER_OCTAVE - 1
    return f"{tpc_to_name(spell_pitch(pitch))}{octave}"
