"""Retuner: one pass over a score that snaps melody notes to the governing chord."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from harmonysnap.chord_expander import expand_chord_spec
from harmonysnap.chord_models import ChordSpec, NoteName
from harmonysnap.chord_parser import parse_chord_symbol
from harmonysnap.harmony_timeline import ChordSymbolEvent, HarmonyTimeline, build_timeline
from harmonysnap.logger_config import logger
from harmonysnap.pitch_utils import pitch_name
from harmonysnap.scale_deriver import scale_for_chord
from harmonysnap.score_models import HostNote, ScoreHost
from harmonysnap.snapping import (
    WHOLE_NOTE_TICKS,
    alter_pitch_of_note,
    is_last_in_tie_chain,
    is_strong_beat,
    nearest_pitch_class,
    repitch_earlier_notes_in_tie_chain,
)
from harmonysnap.voicing_strategy import add_bass, render, resolve_root

TARGET_SOURCES: Final[set[str]] = {"chord", "scale"}


@dataclass(frozen=True)
class RetuneSettings:
    """
    Options for a retuning pass.

    Attributes:
        strong_beat_source: "chord" or "scale"; target set for notes on a beat.
        weak_beat_source:   "chord" or "scale"; target set for notes between beats.
        include_bass:       Add the chord's bass note to both target sets.
        whole_note_ticks:   Tick length of a whole note in the host document.
    """

    strong_beat_source: str = "chord"
    weak_beat_source: str = "scale"
    include_bass: bool = True
    whole_note_ticks: int = WHOLE_NOTE_TICKS

    def __post_init__(self) -> None:
        for name in ("strong_beat_source", "weak_beat_source"):
            value = getattr(self, name)
            if value not in TARGET_SOURCES:
                supported = ", ".join(sorted(TARGET_SOURCES))
                raise ValueError(f"Unsupported {name} '{value}'. Use one of: {supported}.")


@dataclass
class ChordContext:
    """Target pitches derived once per chord symbol event."""

    spec: ChordSpec
    root: NoteName
    chord_tones: list[int] = field(default_factory=list)
    scale_tones: list[int] = field(default_factory=list)


@dataclass
class RetuneReport:
    """Counters collected during a pass."""

    notes_seen: int = 0
    notes_changed: int = 0
    notes_without_chord: int = 0
    tied_notes_repitched: int = 0


class Retuner:
    """
    Snap every melody note to the chord symbol governing its position.

    Algorithm overview
    ------------------
    1. Collect every chord symbol annotation into a HarmonyTimeline.

    2. Walk the segments in score order. A note with no governing chord
       (before the first symbol, or after "N.C.") keeps its pitch; the
       earlier notes of a tie chain ending there still take that pitch.

    3. A note on a beat of the time signature's denominator snaps to the
       chord tones; any other note snaps to the chord's derived scale. Both
       target sets include the bass note.

    4. When a note ends a tie chain, every earlier note of the chain takes
       its final pitch, so tied notes never split into different pitches.

    The root of the previous chord (used for bass-only symbols such as
    "/B") is state of a single pass and starts empty on every ``retune()``.
    """

    def __init__(self, settings: RetuneSettings | None = None) -> None:
        self.settings = settings or RetuneSettings()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_context(self, text: str, previous_root: NoteName | None) -> ChordContext:
        spec = parse_chord_symbol(text)
        root = resolve_root(spec, previous_root)

        chord_tones = render(expand_chord_spec(spec), root)
        scale_tones = render(scale_for_chord(spec), root)
        if self.settings.include_bass:
            chord_tones = add_bass(spec, root, chord_tones)
            scale_tones = add_bass(spec, root, scale_tones)

        logger.debug(
            "Chord %r: chord tones %s, scale %s",
            text,
            [pitch_name(p) for p in chord_tones],
            [pitch_name(p) for p in scale_tones],
        )
        return ChordContext(spec=spec, root=root, chord_tones=chord_tones, scale_tones=scale_tones)

    def _targets(self, context: ChordContext, strong: bool) -> list[int]:
        source = self.settings.strong_beat_source if strong else self.settings.weak_beat_source
        return context.chord_tones if source == "chord" else context.scale_tones

    def _snap(self, note: HostNote, targets: list[int], host: ScoreHost, report: RetuneReport) -> None:
        original = note.pitch
        alter_pitch_of_note(note, nearest_pitch_class(original, targets))
        if note.pitch != original:
            report.notes_changed += 1
            logger.debug("Snapped %s -> %s", pitch_name(original), pitch_name(note.pitch))

        if is_last_in_tie_chain(note, host):
            report.tied_notes_repitched += repitch_earlier_notes_in_tie_chain(note, host)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_timeline(self, host: ScoreHost) -> HarmonyTimeline:
        annotations = [
            (segment.position, text)
            for segment in host.segments()
            for text in segment.chord_symbols
        ]
        return build_timeline(annotations, host.end_position)

    def retune(self, host: ScoreHost) -> RetuneReport:
        """
        Run one retuning pass over ``host``, rewriting note pitches in place.

        Returns:
            RetuneReport with counts of inspected and changed notes.
        """
        timeline = self.build_timeline(host)
        report = RetuneReport()
        contexts: dict[int, ChordContext] = {}
        previous_root: NoteName | None = None

        for segment in host.segments():
            if not segment.notes:
                continue

            event: ChordSymbolEvent | None = timeline.event_at(segment.position)
            if event is None or event.text is None:
                for note in segment.notes:
                    report.notes_seen += 1
                    report.notes_without_chord += 1
                    # Keep a chain that ends here in one piece.
                    if is_last_in_tie_chain(note, host):
                        report.tied_notes_repitched += repitch_earlier_notes_in_tie_chain(note, host)
                continue

            context = contexts.get(event.position)
            if context is None:
                context = self._build_context(event.text, previous_root)
                contexts[event.position] = context
                previous_root = context.root

            _, denominator = segment.time_signature
            strong = is_strong_beat(
                segment.position,
                segment.measure_start,
                denominator,
                self.settings.whole_note_ticks,
            )
            targets = self._targets(context, strong)

            for note in segment.notes:
                report.notes_seen += 1
                self._snap(note, targets, host, report)

        logger.info(
            "Retuned %d of %d note(s) against %d chord symbol(s); %d left without a chord",
            report.notes_changed,
            report.notes_seen,
            len(timeline),
            report.notes_without_chord,
        )
        return report
