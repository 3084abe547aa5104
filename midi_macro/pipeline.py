# midi_macro/pipeline.py
import logging
import os

from midi_macro.config import ConvertConfig
from midi_macro.io_midicsv import load_song
from midi_macro.macro import build_macro_commands, macro_to_lines, write_macro
from midi_macro.notes import extract_note_events
from midi_macro.pitch_to_keymap import KeyMapper
from midi_macro.song import TempoMessage
from midi_macro.tempo import DEFAULT_TEMPO, build_tempo_map, get_timer, tempo_to_bpm

logger = logging.getLogger(__name__)

# explicit option -> filename suffix label, in suffix order
SUFFIX_LABELS = (
    ("transpose_semitones", "transpose"),
    ("tempo_multiplier", "tempo"),
    ("game_profile", "game"),
    ("min_note_duration_seconds", "duration"),
)


def first_tempo(song):
    """First tempo event of the first track, wherever it falls; 120 BPM if it has none."""
    if song.tracks:
        for _, message in song.tracks[0]:
            if isinstance(message, TempoMessage):
                return message.microseconds_per_quarter
    return DEFAULT_TEMPO


def midi_info(song):
    return {
        "tracks": len(song.tracks),
        "bpm": round(tempo_to_bpm(first_tempo(song)), 2),
        "ppqn": song.ticks_per_quarter,
    }


def song_to_note_events(song, config, tempo_map=None):
    tempo_map = tempo_map or build_tempo_map(song.tracks)
    return extract_note_events(
        song.tracks,
        song.ticks_per_quarter,
        tempo_map,
        transpose=config.transpose_semitones,
        speed_multiplier=config.tempo_multiplier,
        timer=get_timer(config.tempo_mode),
    )


def events_to_lines(events, config):
    commands = build_macro_commands(
        events,
        KeyMapper(config.game_profile),
        min_note_duration_ms=config.min_note_duration_ms,
        min_delay_threshold_ms=config.min_delay_threshold_ms,
    )
    logger.debug("%d note events -> %d macro commands", len(events), len(commands))
    return macro_to_lines(commands, key_press_gap_ms=config.key_press_gap_ms)


def convert_song(song, config=None):
    """
    MidiSong -> list of .mcr lines.

      1) Build the tempo map.
      2) Extract and time every note event.
      3) Synthesize delays and key presses.
      4) Render them as text.
    """
    config = config or ConvertConfig()
    return events_to_lines(song_to_note_events(song, config), config)


def format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def filename_suffix(config, explicit=(), default_game="wwm"):
    parts = []
    for field_name, label in SUFFIX_LABELS:
        if field_name not in explicit:
            continue
        value = getattr(config, field_name)
        if field_name == "game_profile":
            if value.lower() == default_game.lower():
                continue
            parts.append(f"{label}-{value.lower()}")
        else:
            parts.append(f"{label}-{format_number(value)}")
    return parts


def default_output_file(midi_path, config, explicit=(), default_game="wwm"):
    """
    <midi name>[-<option>-<value>...].mcr, placed in config.output_directory.

    Only options named in `explicit` appear in the suffix.
    """
    base = os.path.splitext(os.path.basename(midi_path))[0]
    parts = filename_suffix(config, explicit, default_game)
    suffix = "-" + "-".join(parts) if parts else ""
    filename = f"{base}{suffix}.mcr"

    if not config.output_directory:
        return filename
    return os.path.join(config.output_directory, filename)


def convert_file(midi_path, output_path=None, config=None, explicit=(), default_game="wwm"):
    config = config or ConvertConfig()
    if not os.path.isfile(midi_path):
        raise FileNotFoundError(f"MIDI file not found: {midi_path}")

    output_path = output_path or default_output_file(midi_path, config, explicit, default_game)

    logger.info("Reading MIDI file: %s", midi_path)
    song = load_song(midi_path)
    tempo_map = build_tempo_map(song.tracks)

    info = midi_info(song)
    logger.info("Tracks: %d", info["tracks"])
    logger.info("Tempo: %s BPM", info["bpm"])
    logger.info("PPQ: %d", info["ppqn"])

    events = song_to_note_events(song, config, tempo_map)
    logger.info("Found %d note events", len(events))

    lines = events_to_lines(events, config)

    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    write_macro(lines, output_path)

    logger.info("Conversion complete! Output written to: %s", output_path)
    return output_path
