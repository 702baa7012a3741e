"""Scale derivation: fill the gaps of a chord with a scale that suits its quality."""

from typing import Final

from harmonysnap.chord_expander import expand_chord_spec
from harmonysnap.chord_models import ChordSpec, PitchClassMap

MAJOR_SCALE: Final[PitchClassMap] = {1: 0, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0, 7: 0}
NATURAL_MINOR_SCALE: Final[PitchClassMap] = {1: 0, 2: 0, 3: -1, 4: 0, 5: 0, 6: -1, 7: -1}
WHOLE_HALF_DIMINISHED_SCALE: Final[PitchClassMap] = {1: 0, 2: 0, 3: -1, 4: 0, 5: -1, 6: -1, 7: -2, 8: -1}
LOCRIAN_NATURAL_2_SCALE: Final[PitchClassMap] = {1: 0, 2: 0, 3: -1, 4: 0, 5: -1, 6: -1, 7: -1}
WHOLE_TONE_SCALE: Final[PitchClassMap] = {1: 0, 2: 0, 3: 0, 4: 1, 5: 1, 6: 1, 8: 1}

#: Dominant chords use the major scale; their flat seventh comes from the
#: chord itself and always beats the scale's natural seventh.
SCALE_FOR_QUALITY: Final[dict[str, PitchClassMap]] = {
    "major": MAJOR_SCALE,
    "dominant": MAJOR_SCALE,
    "minor": NATURAL_MINOR_SCALE,
    "diminished": WHOLE_HALF_DIMINISHED_SCALE,
    "half-diminished": LOCRIAN_NATURAL_2_SCALE,
    "augmented": WHOLE_TONE_SCALE,
}

OCTAVE_DEGREE = 8
COMPOUND_OFFSET = 7  # 2 <-> 9, 4 <-> 11, 6 <-> 13


def scale_for_chord(spec: ChordSpec) -> PitchClassMap:
    """
    Return the chord's own tones plus scale tones for every degree it leaves open.

    A degree 1-7 is filled from the quality's scale only when neither it nor
    its compound form (degree + 7) is already in the chord, so ``C7b9`` keeps
    its flat nine instead of gaining a natural second. A degree-8 entry in
    the scale (diminished and whole-tone) is always copied in.
    """
    scale = SCALE_FOR_QUALITY[spec.quality]
    result = expand_chord_spec(spec)

    for degree in range(1, OCTAVE_DEGREE):
        if degree in result or degree + COMPOUND_OFFSET in result:
            continue
        if degree in scale:
            result[degree] = scale[degree]

    if OCTAVE_DEGREE in scale:
        result[OCTAVE_DEGREE] = scale[OCTAVE_DEGREE]

    return dict(sorted(result.items()))
