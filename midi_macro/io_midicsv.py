# midi_macro/io_midicsv.py
import logging
import os

import chardet
import py_midicsv as pm

from midi_macro.song import MidiSong, NoteOffMessage, NoteOnMessage, TempoMessage

logger = logging.getLogger(__name__)


class MidiFormatError(ValueError):
    """Raised when a MIDI or midicsv source cannot be decoded."""


def detect_encoding(path):
    with open(path, "rb") as f:
        encoding_type = chardet.detect(f.read())["encoding"]
    return encoding_type or "utf-8"


def parse_midicsv_lines(lines):
    events = []
    for lineno, line in enumerate(lines, start=1):
        raw = line.rstrip("\r\n")
        striped = raw.strip()

        if striped == "" or striped.startswith("#") or striped.startswith(";"):
            events.append({"raw_line": raw, "is_data": False})
            continue

        parts = [p.strip() for p in raw.split(",")]
        if len(parts) < 3:
            events.append({"raw_line": raw, "is_data": False})
            continue

        try:
            track = int(parts[0])
            time = int(parts[1])
        except ValueError as exc:
            raise MidiFormatError(f"line {lineno}: bad track/time column: {raw!r}") from exc

        events.append({
            "raw_line": raw,
            "is_data": True,
            "track": track,
            "time": time,
            "type": parts[2],
            "args": parts[3:],
        })
    return events


def load_midicsv(path):
    with open(path, "r", newline="", encoding=detect_encoding(path)) as f:
        return parse_midicsv_lines(f)


def midi_to_csv_lines(midi_path):
    try:
        return pm.midi_to_csv(str(midi_path))
    except OSError:
        raise
    except Exception as exc:
        raise MidiFormatError(f"cannot decode MIDI file {midi_path}: {exc}") from exc


def midi_to_csv(midi_path, csv_out):
    csv_lines = midi_to_csv_lines(midi_path)
    with open(csv_out, "w", encoding="utf-8", newline="\n") as f:
        f.writelines(csv_lines)


def csv_to_midi(csv_in, midi_out):
    with open(csv_in, "r", encoding=detect_encoding(csv_in)) as f:
        csv_lines = f.readlines()
    midi_object = pm.csv_to_midi(csv_lines)
    with open(midi_out, "wb") as output_file:
        midi_writer = pm.FileWriter(output_file)
        midi_writer.write(midi_object)


def _int_arg(ev, index):
    try:
        return int(ev["args"][index])
    except (IndexError, ValueError) as exc:
        raise MidiFormatError(f"malformed {ev['type']} record: {ev['raw_line']!r}") from exc


def records_to_song(records):
    """
    Turn midicsv records into a MidiSong.

    midicsv stores absolute per-track times; they are converted back to
    deltas so every track reads as (delta_ticks, message) pairs.
    Track 0 holds the file header and is not a track of its own.
    """
    division = None
    by_track = {}

    for ev in records:
        if not ev.get("is_data"):
            continue

        etype = ev["type"]
        if etype == "Header":
            division = _int_arg(ev, 2)
            continue

        if ev["track"] <= 0:
            continue

        rows = by_track.setdefault(ev["track"], [])

        if etype == "Note_on_c":
            message = NoteOnMessage(pitch=_int_arg(ev, 1), velocity=_int_arg(ev, 2),
                                    channel=_int_arg(ev, 0))
        elif etype == "Note_off_c":
            message = NoteOffMessage(pitch=_int_arg(ev, 1), channel=_int_arg(ev, 0))
        elif etype == "Tempo":
            message = TempoMessage(microseconds_per_quarter=_int_arg(ev, 0))
        else:
            continue

        rows.append((ev["time"], message))

    if division is None:
        raise MidiFormatError("No Header record with division found in file.")
    if division <= 0:
        raise MidiFormatError(f"Unsupported division {division} (SMPTE timing is not supported).")

    tracks = []
    for number in sorted(by_track):
        track = []
        previous = 0
        for time, message in by_track[number]:
            track.append((max(0, time - previous), message))
            previous = max(previous, time)
        tracks.append(track)

    return MidiSong(ticks_per_quarter=division, tracks=tracks)


def load_song(path):
    """Load a standard MIDI file, or a midicsv text file when the name ends in .csv."""
    path = os.fspath(path)
    if path.lower().endswith(".csv"):
        records = load_midicsv(path)
    else:
        records = parse_midicsv_lines(midi_to_csv_lines(path))

    song = records_to_song(records)
    logger.debug("Loaded %s: %d tracks, division %d", path, len(song.tracks), song.ticks_per_quarter)
    return song
