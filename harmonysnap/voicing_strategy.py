"""Rendering and voicing: turn a PitchClassMap into concrete MIDI pitches."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Final

from harmonysnap.chord_expander import expand_chord_spec
from harmonysnap.chord_models import ChordSpec, NoteName, PitchClassMap
from harmonysnap.chord_parser import parse_chord_symbol
from harmonysnap.logger_config import logger
from harmonysnap.pitch_utils import BASS_CEILING, SEMITONES_PER_OCTAVE

#: Semitones above the root for each scale degree.
DEGREE_SEMITONES: Final[dict[int, int]] = {
    1: 0, 2: 2, 3: 4, 4: 5, 5: 7, 6: 9, 7: 11,
    8: 12, 9: 14, 10: 16, 11: 17, 12: 19, 13: 21,
}

#: Root used when a bass-only symbol ("/B") is the first chord of a pass.
DEFAULT_ROOT = NoteName(letter="C")

#: Inversion threshold by root pitch class. Exactly one condensed-voicing
#: note should sit above it; the values keep the voicing near middle C.
INVERSION_THRESHOLDS: Final[list[int]] = [60, 61, 62, 62, 63, 60, 62, 61, 60, 62, 62, 62]

CONDENSED_MAX_TONES = 4


def resolve_root(spec: ChordSpec, previous_root: NoteName | None) -> NoteName:
    """Return the chord root, falling back to the previous chord's root for "/B"-style symbols."""
    if spec.root is not None:
        return spec.root
    return previous_root if previous_root is not None else DEFAULT_ROOT


def render(pitch_map: PitchClassMap, root: NoteName) -> list[int]:
    """
    Convert scale degrees into ascending MIDI pitches above the root.

    The root sits in the octave starting at C3 (MIDI 48), so C major renders
    as [48, 52, 55]. Degrees outside 1-13 (e.g. from "add15") have no
    offset and are skipped with a warning.
    """
    tonic = root.reference_pitch
    pitches: list[int] = []
    for degree, alteration in pitch_map.items():
        offset = DEGREE_SEMITONES.get(degree)
        if offset is None:
            logger.warning("Ignoring scale degree %d of %s chord; only degrees 1-13 are voiced", degree, root.name)
            continue
        pitches.append(tonic + offset + alteration)
    return sorted(pitches)


def add_bass(spec: ChordSpec, root: NoteName, pitches: list[int]) -> list[int]:
    """
    Prepend the bass note (the slash bass, else the root) to ``pitches``.

    Bass notes from E3 upward are dropped an octave. Nothing is added when
    the bass already is the lowest pitch.
    """
    bass = (spec.bass or root).reference_pitch
    if bass >= BASS_CEILING:
        bass -= SEMITONES_PER_OCTAVE
    if pitches and pitches[0] == bass:
        return list(pitches)
    return [bass, *pitches]


def prune(pitch_map: PitchClassMap, max_tones: int) -> PitchClassMap:
    """
    Drop the least important tones until at most ``max_tones`` remain.

    Deletion order: the root, a perfect fifth, then the second-highest
    degree (so a 13th chord keeps its 13 but loses the 11 and 9).
    """
    result = dict(sorted(pitch_map.items()))
    while len(result) > max_tones:
        if 1 in result:
            del result[1]
        elif result.get(5) == 0:
            del result[5]
        else:
            del result[list(result)[-2]]
    return result


def _count_above(pitches: list[int], threshold: int) -> int:
    return sum(1 for pitch in pitches if pitch > threshold)


def find_optimum_inversion(pitches: list[int], root: NoteName) -> list[int]:
    """Shift notes by octaves until exactly one lies above the root's threshold."""
    result = sorted(pitches)
    if not result:
        return result

    threshold = INVERSION_THRESHOLDS[root.semitone]
    while _count_above(result, threshold) < 1:
        result[0] += SEMITONES_PER_OCTAVE
        result.sort()
    while _count_above(result, threshold) > 1:
        result[-1] -= SEMITONES_PER_OCTAVE
        result.sort()
    return result


@dataclass
class VoicedChord:
    """
    A chord symbol annotated with concrete MIDI note assignments.

    Attributes:
        spec:    The parsed chord symbol.
        root:    The root actually used (the previous root for bass-only symbols).
        pitches: Ascending MIDI pitches; the bass note comes first.
    """

    spec: ChordSpec
    root: NoteName
    pitches: list[int] = field(default_factory=list)


# ── Abstract base ────────────────────────────────────────────────────────────

class VoicingStrategy(ABC):
    """
    Abstract Strategy for assigning MIDI pitches to a parsed chord symbol.

    Concrete subclasses implement ``voice()`` to produce different note
    layouts.
    """

    def _tones(self, spec: ChordSpec) -> PitchClassMap:
        return expand_chord_spec(spec)

    @abstractmethod
    def voice(self, spec: ChordSpec, previous_root: NoteName | None = None) -> VoicedChord:
        """
        Map a ChordSpec to a VoicedChord with concrete MIDI note numbers.

        Args:
            spec:          Parsed chord symbol.
            previous_root: Root of the previous chord, used when ``spec`` has none.
        """


# ── Concrete strategies ──────────────────────────────────────────────────────

class RawVoicer(VoicingStrategy):
    """Every chord tone, stacked above the root in the C3 octave, plus the bass."""

    def voice(self, spec: ChordSpec, previous_root: NoteName | None = None) -> VoicedChord:
        root = resolve_root(spec, previous_root)
        pitches = render(self._tones(spec), root)
        return VoicedChord(spec=spec, root=root, pitches=add_bass(spec, root, pitches))


class CondensedVoicer(VoicingStrategy):
    """
    At most four chord tones plus the bass, inverted to sit around middle C.

    Close to the playback voicings commonly used for lead-sheet chord
    symbols: the root and a plain fifth are the first tones dropped, and
    only the top note of the voicing rises above the threshold.
    """

    def __init__(self, max_tones: int = CONDENSED_MAX_TONES) -> None:
        self.max_tones = max_tones

    def voice(self, spec: ChordSpec, previous_root: NoteName | None = None) -> VoicedChord:
        root = resolve_root(spec, previous_root)
        pitches = render(prune(self._tones(spec), self.max_tones), root)
        pitches = find_optimum_inversion(pitches, root)
        return VoicedChord(spec=spec, root=root, pitches=add_bass(spec, root, pitches))


def chord_text_to_pitches(
    text: str,
    condensed: bool = False,
    previous_root: NoteName | None = None,
) -> list[int]:
    """Parse, expand and voice a chord symbol, e.g. "C7b9" -> [48, 52, 55, 58, 61]."""
    voicer: VoicingStrategy = CondensedVoicer() if condensed else RawVoicer()
    return voicer.voice(parse_chord_symbol(text), previous_root).pitches
