"""HarmonyTimeline: which chord symbol governs each score position."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass

from harmonysnap.chord_parser import is_no_chord


@dataclass(frozen=True)
class ChordSymbolEvent:
    """
    A chord symbol occurrence in the score.

    Attributes:
        position: Tick position of the annotation.
        text:     Symbol text; None for "N.C." (no chord).
        duration: Ticks until the next chord symbol (or the end of the score).
    """

    position: int
    text: str | None
    duration: int


class HarmonyTimeline:
    """Ordered chord symbol events with lookup of the governing chord."""

    def __init__(self, events: list[ChordSymbolEvent]) -> None:
        self.events = events
        self._positions = [event.position for event in events]

    def __len__(self) -> int:
        return len(self.events)

    def event_at(self, position: int) -> ChordSymbolEvent | None:
        """Return the latest event at or before ``position``."""
        index = bisect_right(self._positions, position) - 1
        if index < 0:
            return None
        return self.events[index]

    def governing_chord(self, position: int) -> str | None:
        """Return the text of the latest chord symbol at or before ``position``, or None."""
        event = self.event_at(position)
        return event.text if event is not None else None


def build_timeline(annotations: Iterable[tuple[int, str | None]], end_position: int) -> HarmonyTimeline:
    """
    Build a timeline from (position, text) annotations in score order.

    When several annotations share a position (e.g. on different staves)
    the last one wins. "N.C." is stored as None.
    """
    by_position: dict[int, str | None] = {}
    for position, text in annotations:
        by_position[position] = None if is_no_chord(text) else text

    positions = sorted(by_position)
    events: list[ChordSymbolEvent] = []
    for index, position in enumerate(positions):
        following = positions[index + 1] if index + 1 < len(positions) else max(end_position, position)
        events.append(ChordSymbolEvent(position=position, text=by_position[position], duration=following - position))
    return HarmonyTimeline(events)
