# midi_macro/config.py
import os
from dataclasses import dataclass, replace

from dotenv import find_dotenv, load_dotenv

from midi_macro.tempo import TEMPO_MODES


class ConfigError(ValueError):
    pass


# environment variable -> (field, parser)
ENV_FIELDS = {
    "DEFAULT_GAME": ("game_profile", str),
    "DEFAULT_TEMPO_MULTIPLIER": ("tempo_multiplier", float),
    "DEFAULT_MIN_NOTE_DURATION": ("min_note_duration_seconds", float),
    "DEFAULT_TRANSPOSE": ("transpose_semitones", int),
    "MIN_DELAY_THRESHOLD": ("min_delay_threshold_ms", int),
    "KEY_PRESS_DELAY": ("key_press_gap_ms", int),
    "OUTPUT_DIRECTORY": ("output_directory", str),
    "TEMPO_MODE": ("tempo_mode", str),
}


@dataclass(frozen=True)
class ConvertConfig:
    game_profile: str = "wwm"
    tempo_multiplier: float = 1.0
    min_note_duration_seconds: float = 0.1
    transpose_semitones: int = 0
    min_delay_threshold_ms: int = 5
    key_press_gap_ms: int = 2
    tempo_mode: str = "flat"
    output_directory: str = ""

    def __post_init__(self):
        if self.tempo_multiplier <= 0:
            raise ConfigError(f"tempo_multiplier must be positive, got {self.tempo_multiplier}")
        if self.min_note_duration_seconds < 0:
            raise ConfigError(f"min_note_duration_seconds must not be negative, got {self.min_note_duration_seconds}")
        if self.min_delay_threshold_ms < 0:
            raise ConfigError(f"min_delay_threshold_ms must not be negative, got {self.min_delay_threshold_ms}")
        if self.key_press_gap_ms < 0:
            raise ConfigError(f"key_press_gap_ms must not be negative, got {self.key_press_gap_ms}")
        if self.tempo_mode not in TEMPO_MODES:
            raise ConfigError(f"tempo_mode must be one of {', '.join(TEMPO_MODES)}, got {self.tempo_mode!r}")

    @property
    def min_note_duration_ms(self) -> float:
        return self.min_note_duration_seconds * 1000

    @classmethod
    def from_env(cls, environ=None):
        """Defaults, overridden by any of the ENV_FIELDS variables that are set."""
        environ = os.environ if environ is None else environ
        values = {}
        for name, (field_name, parse) in ENV_FIELDS.items():
            raw = environ.get(name)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field_name] = parse(raw.strip())
            except ValueError as exc:
                raise ConfigError(f"{name}={raw!r} is not a valid {parse.__name__}") from exc
        return cls(**values)

    def with_overrides(self, **values):
        return replace(self, **{k: v for k, v in values.items() if v is not None})


def load_env_file(dotenv_path=None):
    """
    Load KEY=value pairs from a .env file into os.environ.

    Without a path, the nearest .env from the working directory upwards is
    used. Variables already set in the environment are left alone.
    Returns the path that was loaded, or None.
    """
    dotenv_path = dotenv_path or find_dotenv(usecwd=True)
    if not dotenv_path or not os.path.isfile(dotenv_path):
        return None
    load_dotenv(dotenv_path, override=False)
    return dotenv_path
