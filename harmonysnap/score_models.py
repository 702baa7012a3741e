"""Host document interfaces consumed by the retuner, plus simple in-memory models."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from harmonysnap.pitch_utils import spell_pitch


class HostNote(Protocol):
    """A melody note the retuner can read and rewrite."""

    pitch: int
    tpc1: int  # sounding spelling
    tpc2: int  # written spelling (differs for transposing instruments)


class HostSegment(Protocol):
    """One score position with the notes and chord symbols attached to it."""

    @property
    def position(self) -> int:
        """Tick position (1920 ticks per whole note)."""

    @property
    def measure_start(self) -> int:
        """Tick position of the first segment of the containing measure."""

    @property
    def time_signature(self) -> tuple[int, int]:
        """(numerator, denominator) of the containing measure."""

    @property
    def notes(self) -> Sequence[HostNote]: ...

    @property
    def chord_symbols(self) -> Sequence[str | None]: ...


class ScoreHost(Protocol):
    """Ordered segment traversal plus read-only tie adjacency."""

    @property
    def end_position(self) -> int: ...

    def segments(self) -> Iterable[HostSegment]: ...

    def tie_back_of(self, note: HostNote) -> HostNote | None: ...

    def tie_forward_of(self, note: HostNote) -> HostNote | None: ...


# ── In-memory implementation ────────────────────────────────────────────────

@dataclass(eq=False)
class Note:
    """
    A plain melody note.

    Attributes:
        pitch:       MIDI pitch.
        tpc1:        Sounding spelling; defaults to the fixed spelling of ``pitch``.
        tpc2:        Written spelling; defaults to ``tpc1``.
        tie_back:    The note this one is tied from.
        tie_forward: The note this one is tied to.
    """

    pitch: int
    tpc1: int | None = None
    tpc2: int | None = None
    tie_back: "Note | None" = field(default=None, repr=False)
    tie_forward: "Note | None" = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.tpc1 is None:
            self.tpc1 = spell_pitch(self.pitch)
        if self.tpc2 is None:
            self.tpc2 = self.tpc1


@dataclass
class Segment:
    position: int
    measure_start: int = 0
    time_signature: tuple[int, int] = (4, 4)
    notes: list[Note] = field(default_factory=list)
    chord_symbols: list[str | None] = field(default_factory=list)


@dataclass
class Score:
    """In-memory ScoreHost; segments must already be in score order."""

    segment_list: list[Segment] = field(default_factory=list)
    length: int | None = None

    @property
    def end_position(self) -> int:
        if self.length is not None:
            return self.length
        return self.segment_list[-1].position + 1 if self.segment_list else 0

    def segments(self) -> list[Segment]:
        return self.segment_list

    def tie_back_of(self, note: Note) -> Note | None:
        return note.tie_back

    def tie_forward_of(self, note: Note) -> Note | None:
        return note.tie_forward


def tie(*notes: Note) -> None:
    """Link ``notes`` into one tie chain, in order."""
    for earlier, later in zip(notes, notes[1:]):
        earlier.tie_forward = later
        later.tie_back = earlier
