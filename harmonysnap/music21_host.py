"""Music21Host: exposes a music21 score through the retuner's host interfaces."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any

from harmonysnap.logger_config import logger
from harmonysnap.midi_exporter import TICKS_PER_QUARTER, MelodyEvent
from harmonysnap.pitch_utils import name_to_tpc, tpc_to_name

NO_CHORD_TEXT = "N.C."
TIE_BACK_TYPES = frozenset({"stop", "continue"})
TIE_FORWARD_TYPES = frozenset({"start", "continue"})

# music21 spells flats as "-" ("B-7", "C/E-"); the parser reads "-" as minor.
_M21_FLATS = re.compile(r"(^|/)([A-G])(-+)")


class HostDocumentError(ValueError):
    """Raised when a score cannot be read or written."""


def to_ticks(offset: float | Fraction) -> int:
    """Convert a music21 quarter-length offset to ticks (480 per quarter)."""
    return int(round(float(offset) * TICKS_PER_QUARTER))


def chord_symbol_text(figure: str) -> str:
    """Rewrite a music21 chord figure in lead-sheet spelling: "B-7" -> "Bb7", "C/E-" -> "C/Eb"."""
    return _M21_FLATS.sub(lambda m: m.group(1) + m.group(2) + "b" * len(m.group(3)), figure)


class Music21NoteAdapter:
    """
    A music21 ``Note`` seen as a HostNote.

    ``tpc1`` is read from and written to the note's spelling. music21 keeps
    no separate written pitch per note, so ``tpc2`` is tracked here and
    starts equal to ``tpc1``.
    """

    def __init__(self, m21_note: Any, part: int, start: int, duration: int) -> None:
        self.m21_note = m21_note
        self.part = part
        self.start = start
        self.duration = duration
        self._tpc2 = self.tpc1

    @property
    def pitch(self) -> int:
        return int(self.m21_note.pitch.midi)

    @pitch.setter
    def pitch(self, value: int) -> None:
        self.m21_note.pitch.midi = value

    @property
    def tpc1(self) -> int:
        m21_pitch = self.m21_note.pitch
        alter = int(m21_pitch.accidental.alter) if m21_pitch.accidental is not None else 0
        return name_to_tpc(m21_pitch.step, alter)

    @tpc1.setter
    def tpc1(self, value: int) -> None:
        from music21 import pitch as m21pitch

        midi = self.pitch
        name = tpc_to_name(value)
        spelled = m21pitch.Pitch(name[0] + name[1:].replace("b", "-"))
        spelled.octave = 4
        spelled.octave += (midi - int(spelled.midi)) // 12
        self.m21_note.pitch = spelled

    @property
    def tpc2(self) -> int:
        return self._tpc2

    @tpc2.setter
    def tpc2(self, value: int) -> None:
        self._tpc2 = value


@dataclass
class Music21Segment:
    position: int
    measure_start: int
    time_signature: tuple[int, int]
    notes: list[Music21NoteAdapter] = field(default_factory=list)
    chord_symbols: list[str | None] = field(default_factory=list)


class Music21Host:
    """
    ScoreHost over a music21 ``Score``.

    Every part is flattened into segments keyed by tick position. Chord
    symbols (``harmony.ChordSymbol``; ``harmony.NoChord`` reads as "N.C.")
    from any part are attached to the segment at their position. Ties are
    resolved per part by pitch: a note whose tie stops or continues links
    back to the last open tie on the same pitch.
    """

    def __init__(self, score: Any) -> None:
        self.score = score
        self.part_names: list[str] = []
        self._segments: dict[int, Music21Segment] = {}
        self._notes: list[Music21NoteAdapter] = []
        self._tie_back: dict[Music21NoteAdapter, Music21NoteAdapter] = {}
        self._tie_forward: dict[Music21NoteAdapter, Music21NoteAdapter] = {}
        for index, part in enumerate(score.parts):
            self._load_part(index, part)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _segment(self, position: int, measure_start: int, time_signature: tuple[int, int]) -> Music21Segment:
        segment = self._segments.get(position)
        if segment is None:
            segment = Music21Segment(position, measure_start, time_signature)
            self._segments[position] = segment
        return segment

    def _load_part(self, index: int, part: Any) -> None:
        from music21 import chord, harmony, note, stream

        self.part_names.append(str(part.partName or ""))
        time_signature = (4, 4)
        part_notes: list[tuple[Music21NoteAdapter, Any]] = []

        for measure in part.getElementsByClass(stream.Measure):
            if measure.timeSignature is not None:
                time_signature = (
                    int(measure.timeSignature.numerator),
                    int(measure.timeSignature.denominator),
                )
            measure_offset = part.elementOffset(measure)
            measure_start = to_ticks(measure_offset)

            for element in measure.recurse():
                if not isinstance(element, (note.Note, chord.Chord)):
                    continue
                position = to_ticks(measure_offset + element.getOffsetInHierarchy(measure))
                segment = self._segment(position, measure_start, time_signature)

                if isinstance(element, harmony.ChordSymbol):
                    if isinstance(element, harmony.NoChord):
                        segment.chord_symbols.append(NO_CHORD_TEXT)
                    else:
                        segment.chord_symbols.append(chord_symbol_text(element.figure))
                    continue

                duration = to_ticks(element.duration.quarterLength)
                members = element.notes if isinstance(element, chord.Chord) else [element]
                for member in members:
                    adapter = Music21NoteAdapter(member, index, position, duration)
                    segment.notes.append(adapter)
                    self._notes.append(adapter)
                    part_notes.append((adapter, member.tie or element.tie))

        self._link_ties(part_notes)

    def _link_ties(self, part_notes: list[tuple[Music21NoteAdapter, Any]]) -> None:
        open_ties: dict[int, Music21NoteAdapter] = {}
        for adapter, m21_tie in sorted(part_notes, key=lambda item: item[0].start):
            if m21_tie is None:
                continue
            if m21_tie.type in TIE_BACK_TYPES:
                earlier = open_ties.pop(adapter.pitch, None)
                if earlier is not None:
                    self._tie_back[adapter] = earlier
                    self._tie_forward[earlier] = adapter
            if m21_tie.type in TIE_FORWARD_TYPES:
                open_ties[adapter.pitch] = adapter

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str) -> Music21Host:
        """
        Parse a MusicXML (or other music21-readable) file.

        Raises:
            HostDocumentError: If music21 cannot read the file.
        """
        from music21 import converter, exceptions21, stream

        try:
            parsed = converter.parse(path)
        except exceptions21.Music21Exception as exc:
            raise HostDocumentError(f"could not read score '{path}': {exc}") from exc

        if isinstance(parsed, stream.Opus):
            parsed = parsed.scores[0]
        if not isinstance(parsed, stream.Score):
            score = stream.Score()
            score.insert(0, parsed)
            parsed = score
        logger.debug("Loaded %s with %d part(s)", path, len(parsed.parts))
        return cls(parsed)

    def save(self, path: str) -> None:
        """
        Write the (retuned) score as MusicXML.

        Raises:
            HostDocumentError: If music21 cannot serialise the score.
        """
        from music21 import exceptions21

        try:
            self.score.write("musicxml", fp=path)
        except exceptions21.Music21Exception as exc:
            raise HostDocumentError(f"could not write score '{path}': {exc}") from exc

    @property
    def end_position(self) -> int:
        return to_ticks(self.score.highestTime)

    def segments(self) -> list[Music21Segment]:
        return [self._segments[position] for position in sorted(self._segments)]

    def tie_back_of(self, note: Music21NoteAdapter) -> Music21NoteAdapter | None:
        return self._tie_back.get(note)

    def tie_forward_of(self, note: Music21NoteAdapter) -> Music21NoteAdapter | None:
        return self._tie_forward.get(note)

    def melody_events(self) -> list[MelodyEvent]:
        """Current pitches of every note, for MIDI export."""
        return [
            MelodyEvent(part=adapter.part, pitch=adapter.pitch, start=adapter.start, duration=adapter.duration)
            for adapter in self._notes
        ]
