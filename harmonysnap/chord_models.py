"""Data models for parsed chord symbols."""

from dataclasses import dataclass

from harmonysnap.pitch_utils import letter_to_reference_pitch, letter_to_semitone

#: Scale degree (1-13) -> alteration in semitones (-2, -1, 0 or +1).
#: Keys are unique, so a degree carries at most one alteration.
PitchClassMap = dict[int, int]


@dataclass(frozen=True)
class NoteName:
    """A letter name with optional accidentals, e.g. the root or bass of a chord."""

    letter: str
    sharp: bool = False
    flat: bool = False

    @property
    def semitone(self) -> int:
        return letter_to_semitone(self.letter, self.sharp, self.flat)

    @property
    def reference_pitch(self) -> int:
        return letter_to_reference_pitch(self.letter, self.sharp, self.flat)

    @property
    def name(self) -> str:
        return f"{self.letter.upper()}{'#' if self.sharp else ''}{'b' if self.flat else ''}"


@dataclass(frozen=True)
class Alteration:
    """An explicit alteration such as the ``b9`` in ``C7b9``."""

    degree: int
    sharp: bool = False
    flat: bool = False

    @property
    def value(self) -> int:
        """+1 for sharp, -1 otherwise (a sharp wins when both are written)."""
        return 1 if self.sharp else -1


@dataclass(frozen=True)
class ChordSpec:
    """
    Structured reading of one chord symbol.

    Attributes:
        root:            Chord root; None for bass-only symbols such as "/B".
        major:           Explicit major token ("maj", "M", ...).
        minor:           Minor token ("m", "min", "-", ...).
        diminished:      Diminished token ("dim", "o", "°").
        half_diminished: Half-diminished token ("ø", "0").
        augmented:       Augmented token ("aug", "+").
        triangle:        Major-seventh triangle token ("Δ", "^", "t").
        six_nine:        "69", "6/9" and friends.
        extension:       Top extension number from the front of the symbol.
        major_alt:       Number captured by a mid-symbol "maj<N>" token.
        alt:             Altered-dominant shorthand.
        suspensions:     Suspended degrees, in symbol order.
        additions:       Added degrees, in symbol order.
        drops:           Dropped degrees, in symbol order.
        alterations:     Explicit alterations, in symbol order.
        bass:            Bass override from "/X".
    """

    root: NoteName | None = None
    major: bool = False
    minor: bool = False
    diminished: bool = False
    half_diminished: bool = False
    augmented: bool = False
    triangle: bool = False
    six_nine: bool = False
    extension: int | None = None
    major_alt: int | None = None
    alt: bool = False
    suspensions: tuple[int, ...] = ()
    additions: tuple[int, ...] = ()
    drops: tuple[int, ...] = ()
    alterations: tuple[Alteration, ...] = ()
    bass: NoteName | None = None

    @property
    def quality(self) -> str:
        """Name of the triad quality; "dominant" when no quality token was written."""
        if self.major:
            return "major"
        if self.minor:
            return "minor"
        if self.diminished:
            return "diminished"
        if self.half_diminished:
            return "half-diminished"
        if self.augmented:
            return "augmented"
        return "dominant"
