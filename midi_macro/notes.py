# midi_macro/notes.py
from dataclasses import dataclass
from enum import Enum

from midi_macro.song import NoteOffMessage, NoteOnMessage
from midi_macro.tempo import ticks_to_ms


class NoteKind(Enum):
    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"


@dataclass(frozen=True)
class NoteEvent:
    kind: NoteKind
    pitch: int
    time_ticks: int
    time_ms: float
    velocity: int = 0

    @property
    def is_note_on(self) -> bool:
        return self.kind is NoteKind.NOTE_ON


def extract_note_events(tracks, ticks_per_quarter, tempo_map, transpose=0,
                        speed_multiplier=1.0, timer=ticks_to_ms):
    """
    Collect note-on / note-off events from every track, timed in ms.

    A note-on with velocity 0 counts as a note-off. Pitches are shifted by
    `transpose` and not clamped here. The result is sorted by time_ms.
    """
    events = []

    for track in tracks:
        track_time = 0
        for delta, message in track:
            track_time += delta

            if isinstance(message, NoteOnMessage) and message.velocity > 0:
                kind = NoteKind.NOTE_ON
                velocity = message.velocity
            elif isinstance(message, (NoteOnMessage, NoteOffMessage)):
                kind = NoteKind.NOTE_OFF
                velocity = 0
            else:
                continue

            events.append(NoteEvent(
                kind=kind,
                pitch=message.pitch + transpose,
                time_ticks=track_time,
                time_ms=timer(track_time, ticks_per_quarter, tempo_map, speed_multiplier),
                velocity=velocity,
            ))

    events.sort(key=lambda ev: ev.time_ms)
    return events
