# midi_macro/cli.py
import argparse
import glob
import logging
import os
import shutil
import sys

from midi_macro.config import ConfigError, ConvertConfig, load_env_file
from midi_macro.io_midicsv import MidiFormatError, midi_to_csv
from midi_macro.pipeline import convert_file
from midi_macro.tempo import TEMPO_MODES

logger = logging.getLogger("midi_macro")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# argparse dest -> ConvertConfig field
OPTION_FIELDS = {
    "game": "game_profile",
    "tempo_multiplier": "tempo_multiplier",
    "min_duration": "min_note_duration_seconds",
    "transpose": "transpose_semitones",
    "tempo_mode": "tempo_mode",
}


def build_parser():
    ap = argparse.ArgumentParser(
        prog="midi-to-macro",
        description="Convert a MIDI file into a keyboard macro (.mcr) script.",
    )
    ap.add_argument("midi_file", nargs="?", help="MIDI file (.mid) or midicsv file (.csv)")
    ap.add_argument("-o", "--output", help="Output file path")
    ap.add_argument("-g", "--game", help="Target game: 'wwm' or 'genshin'")
    ap.add_argument("-t", "--tempo-multiplier", type=float, help="Tempo multiplier")
    ap.add_argument("-d", "--min-duration", type=float, help="Minimum note duration in seconds")
    ap.add_argument("--transpose", type=int, help="Transpose notes by semitones")
    ap.add_argument("--tempo-mode", choices=TEMPO_MODES,
                    help="flat: one tempo per timestamp; segmented: integrate tempo changes")
    ap.add_argument("--save-csv", metavar="FILE", help="Also write the decoded midicsv text")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def init_logging(verbose=False):
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def choose_midi_file(directory=".", input_fn=input):
    """Ask the user to pick one of the MIDI files in `directory`."""
    files = sorted(
        glob.glob(os.path.join(directory, "*.mid")) + glob.glob(os.path.join(directory, "*.midi"))
    )
    if not files:
        raise FileNotFoundError(f"No MIDI files found in {os.path.abspath(directory)}")

    print("Available MIDI files:")
    for i, path in enumerate(files, start=1):
        print(f"  {i}. {os.path.basename(path)}")

    try:
        choice = input_fn(f"Select a file [1-{len(files)}]: ").strip()
    except EOFError:
        raise ValueError("Invalid selection: no input") from None
    if not choice.isdigit() or not 1 <= int(choice) <= len(files):
        raise ValueError(f"Invalid selection: {choice!r}")
    return files[int(choice) - 1]


def save_csv(source, csv_out):
    """Write the midicsv text for `source`; a midicsv source is copied as is."""
    if source.lower().endswith(".csv"):
        shutil.copyfile(source, csv_out)
    else:
        midi_to_csv(source, csv_out)


def main(argv=None, input_fn=input):
    args = build_parser().parse_args(argv)
    init_logging(args.verbose)

    try:
        env_file = load_env_file()
        if env_file:
            logger.debug("Loaded settings from %s", env_file)
        defaults = ConvertConfig.from_env()
        overrides = {field: getattr(args, dest) for dest, field in OPTION_FIELDS.items()}
        config = defaults.with_overrides(**overrides)
        explicit = {field for field, value in overrides.items() if value is not None}

        midi_file = args.midi_file or choose_midi_file(input_fn=input_fn)

        if args.save_csv:
            save_csv(midi_file, args.save_csv)
            logger.info("Decoded midicsv written to: %s", args.save_csv)

        convert_file(
            midi_file,
            output_path=args.output,
            config=config,
            explicit=explicit,
            default_game=defaults.game_profile,
        )
    except (ConfigError, MidiFormatError, OSError, ValueError) as exc:
        logger.error("Error: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.error("Cancelled")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
