"""Chord expansion: ChordSpec -> PitchClassMap of the tones the symbol implies."""

from typing import Final

from harmonysnap.chord_models import ChordSpec, PitchClassMap

# ── Triads and default sevenths per quality ────────────────────────────────
#: quality -> (triad, default seventh alteration, seventh always present)
QUALITY_TABLE: Final[dict[str, tuple[PitchClassMap, int, bool]]] = {
    "minor": ({1: 0, 3: -1, 5: 0}, -1, False),
    "diminished": ({1: 0, 3: -1, 5: -1}, -2, True),
    "half-diminished": ({1: 0, 3: -1, 5: -1}, -1, True),
    "augmented": ({1: 0, 3: 0, 5: 1}, -1, False),
    "major": ({1: 0, 3: 0, 5: 0}, 0, False),
    "dominant": ({1: 0, 3: 0, 5: 0}, -1, False),
}

#: Extension number -> degrees it brings in, top down. The seventh takes
#: the quality's default alteration, the others are natural.
EXTENSION_CASCADE: Final[dict[int, tuple[int, ...]]] = {
    13: (13, 11, 9, 7),
    11: (11, 9, 7),
    9: (9, 7),
    7: (7,),
}

#: "alt" is left to the performer; 7#5#9 is a common reading.
ALTERED_DOMINANT: Final[PitchClassMap] = {7: -1, 5: 1, 9: 1}


def expand_chord_spec(spec: ChordSpec) -> PitchClassMap:
    """
    Return every tone of the chord as scale degree -> alteration.

    E.g. ``Cm7`` -> ``{1: 0, 3: -1, 5: 0, 7: -1}``.

    Steps are applied in a fixed order so that later ones override earlier
    ones: triad, triangle, six-nine, drops, ``maj<N>``, extension,
    suspensions, added tones, ``alt``, then explicit alterations. A degree
    holds a single alteration, so of ``b9`` and ``#9`` only the last written
    survives.
    """
    triad, seventh, seventh_present = QUALITY_TABLE[spec.quality]
    result: PitchClassMap = dict(triad)
    if seventh_present:
        result[7] = seventh

    if spec.triangle:
        seventh = 0
        result[7] = seventh

    if spec.six_nine:
        result[6] = 0
        result[9] = 0

    for degree in spec.drops:
        result.pop(degree, None)

    extension = spec.extension
    if spec.major_alt is not None:
        seventh = 0
        extension = spec.major_alt

    if extension in EXTENSION_CASCADE:
        for degree in EXTENSION_CASCADE[extension]:
            result[degree] = seventh if degree == 7 else 0
    elif extension == 6:
        result[6] = 0
    elif extension == 5:
        result.pop(3, None)  # power chord

    for degree in spec.suspensions:
        result[degree] = 0
        result.pop(3, None)

    for degree in spec.additions:
        result[degree] = 0

    if spec.alt:
        result.update(ALTERED_DOMINANT)

    for alteration in spec.alterations:
        result[alteration.degree] = alteration.value

    return dict(sorted(result.items()))
