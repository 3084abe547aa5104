# midi_macro/macro.py
import logging
from dataclasses import dataclass

from midi_macro.notes import NoteKind
from midi_macro.pitch_to_keymap import Key, clamp_pitch, note_full_name

logger = logging.getLogger(__name__)

MODIFIER_KEY_NAMES = {
    "SHIFT": "ShiftLeft",
    "CTRL": "ControlLeft",
    "CONTROL": "ControlLeft",
    "ALT": "AltLeft",
}


@dataclass(frozen=True)
class Delay:
    duration_ms: int


@dataclass
class KeyPress:
    key: Key
    pitch: int
    onset_ms: float
    duration_ms: int


def build_macro_commands(events, key_mapper, min_note_duration_ms=100,
                         min_delay_threshold_ms=5):
    """
    Turn time-sorted NoteEvents into Delay / KeyPress commands.

    A Delay is only inserted when the gap since the previous key press is
    larger than `min_delay_threshold_ms`. Every KeyPress starts with the
    minimum duration; the matching note-off stretches it to the real one.
    Note-ons for pitches the game cannot play are dropped with a warning.
    """
    commands = []
    last_time = 0
    active_notes = {}   # pitch -> onset ms
    last_press = {}     # pitch -> most recent KeyPress for that pitch
    min_duration = round(min_note_duration_ms)

    for ev in events:
        pitch = clamp_pitch(ev.pitch)

        if ev.kind is NoteKind.NOTE_ON:
            key = key_mapper.map(pitch)
            if key is None:
                logger.warning("No key mapping for MIDI note %d (%s)", pitch, note_full_name(pitch))
                continue

            gap = ev.time_ms - last_time
            if gap > min_delay_threshold_ms:
                commands.append(Delay(round(gap)))

            active_notes[pitch] = ev.time_ms
            press = KeyPress(key=key, pitch=pitch, onset_ms=ev.time_ms, duration_ms=min_duration)
            commands.append(press)
            last_press[pitch] = press
            last_time = ev.time_ms
            logger.debug("%.2f ms: note %d -> %s", ev.time_ms, pitch, key)

        elif ev.kind is NoteKind.NOTE_OFF:
            if pitch not in active_notes:
                continue

            note_duration = ev.time_ms - active_notes.pop(pitch)
            press = last_press.get(pitch)
            if press is not None and note_duration > 0:
                press.duration_ms = max(round(note_duration), min_duration)

    return commands


def modifier_to_key_name(modifier: str) -> str:
    return MODIFIER_KEY_NAMES.get(modifier.upper(), modifier)


def key_down(name):
    return f"Keyboard : {name} : KeyDown"


def key_up(name):
    return f"Keyboard : {name} : KeyUp"


def delay(ms):
    return f"DELAY : {ms}"


def macro_to_lines(commands, key_press_gap_ms=2):
    """
    Render commands as .mcr lines.

    Plain key:     down, gap, up
    Modified key:  modifier down, gap, key down, key up, modifier up
    """
    lines = []
    for cmd in commands:
        if isinstance(cmd, Delay):
            lines.append(delay(cmd.duration_ms))
            continue

        key = cmd.key
        if key.is_modified:
            modifier = modifier_to_key_name(key.modifier)
            lines.append(key_down(modifier))
            lines.append(delay(key_press_gap_ms))
            lines.append(key_down(key.key))
            lines.append(key_up(key.key))
            lines.append(key_up(modifier))
        else:
            lines.append(key_down(key.key))
            lines.append(delay(key_press_gap_ms))
            lines.append(key_up(key.key))
    return lines


def write_macro(lines, path):
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        for line in lines:
            f.write(line + "\n")
