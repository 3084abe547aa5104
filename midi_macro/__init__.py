"""MIDI to macro converter: decode MIDI, time notes, map to game keys, write .mcr scripts."""

from midi_macro.config import ConfigError, ConvertConfig
from midi_macro.io_midicsv import MidiFormatError, load_song
from midi_macro.macro import Delay, KeyPress, build_macro_commands, macro_to_lines
from midi_macro.notes import NoteEvent, NoteKind, extract_note_events
from midi_macro.pipeline import convert_file, convert_song
from midi_macro.pitch_to_keymap import GameProfile, Key, KeyMapper
from midi_macro.tempo import TempoMap, build_tempo_map, ticks_to_ms

__all__ = [
    'ConfigError',
    'ConvertConfig',
    'Delay',
    'GameProfile',
    'Key',
    'KeyMapper',
    'KeyPress',
    'MidiFormatError',
    'NoteEvent',
    'NoteKind',
    'TempoMap',
    'build_macro_commands',
    'build_tempo_map',
    'convert_file',
    'convert_song',
    'extract_note_events',
    'load_song',
    'macro_to_lines',
    'ticks_to_ms',
]
