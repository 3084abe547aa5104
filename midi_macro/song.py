# midi_macro/song.py
from dataclasses import dataclass, field


@dataclass(frozen=True)
class NoteOnMessage:
    pitch: int
    velocity: int
    channel: int = 0


@dataclass(frozen=True)
class NoteOffMessage:
    pitch: int
    channel: int = 0


@dataclass(frozen=True)
class TempoMessage:
    microseconds_per_quarter: int


@dataclass
class MidiSong:
    """
    A decoded MIDI file.

    Each track is an ordered list of (delta_ticks, message) pairs, where
    delta_ticks counts from the previous message in the same track.
    """
    ticks_per_quarter: int
    tracks: list = field(default_factory=list)
