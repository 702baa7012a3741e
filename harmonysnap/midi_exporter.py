"""MidiExporter: writes a retuned melody to a multi-track MIDI file."""

from dataclasses import dataclass

from midiutil import MIDIFile

TICKS_PER_QUARTER = 480

# In midiutil Format 1 MIDI, track 0 is the conductor/tempo track.
# Note data written to track 0 is ignored by most players and notation apps.
TRACK_CONDUCTOR = 0  # Tempo only, never receives notes
FIRST_NOTE_TRACK = 1

# Channel 9 is General MIDI percussion; melody tracks skip it.
PERCUSSION_CHANNEL = 9


@dataclass(frozen=True)
class MelodyEvent:
    """
    One sounding note of the melody.

    Attributes:
        part:     Index of the part (staff) the note belongs to.
        pitch:    MIDI pitch after retuning.
        start:    Start position in ticks.
        duration: Length in ticks.
    """

    part: int
    pitch: int
    start: int
    duration: int


class MidiExporter:
    """
    Writes melody events as a Standard MIDI File, one track per part.

    Track layout (Format 1)
    -----------------------
    Track 0: conductor track (tempo only, no notes)

    Track 1..N: one track per part, named from ``part_names`` when given.

    Timing
    ------
    Event positions are ticks at 480 per quarter note, converted to beats
    using: beats = ticks / 480.
    """

    DEFAULT_TEMPO = 100    # BPM
    DEFAULT_VELOCITY = 80  # MIDI velocity (0-127)

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        velocity: int = DEFAULT_VELOCITY,
    ) -> None:
        """
        Args:
            tempo:    Playback tempo in beats per minute.
            velocity: MIDI note-on velocity.
        """
        self.tempo = tempo
        self.velocity = velocity

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ticks_to_beats(self, ticks: int) -> float:
        """Convert a tick count to quarter-note beats."""
        return ticks / TICKS_PER_QUARTER

    def _channel_for(self, part: int) -> int:
        channel = part % 15
        return channel + 1 if channel >= PERCUSSION_CHANNEL else channel

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def export(
        self,
        events: list[MelodyEvent],
        output_path: str,
        part_names: list[str] | None = None,
    ) -> None:
        """
        Render melody events to a Standard MIDI File (SMF format 1).

        Args:
            events:      Melody events; order does not matter.
            output_path: Destination file path (e.g. "melody.mid").
            part_names:  Optional track names, indexed by part.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        part_count = max((event.part for event in events), default=-1) + 1
        names = part_names or []
        midi = MIDIFile(numTracks=FIRST_NOTE_TRACK + max(part_count, 1), removeDuplicates=False, deinterleave=False)

        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)
        for part in range(part_count):
            name = names[part] if part < len(names) and names[part] else f"Part {part + 1}"
            midi.addTrackName(FIRST_NOTE_TRACK + part, 0, name)

        for event in events:
            if event.duration <= 0:
                continue
            midi.addNote(
                track=FIRST_NOTE_TRACK + event.part,
                channel=self._channel_for(event.part),
                pitch=event.pitch,
                time=self._ticks_to_beats(event.start),
                duration=self._ticks_to_beats(event.duration),
                volume=self.velocity,
            )

        with open(output_path, "wb") as f:
            midi.writeFile(f)
