# midi_macro/pitch_to_keymap.py
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

MIDI_MIN = 0
MIDI_MAX = 127


@dataclass(frozen=True)
class Key:
    """A key to press, optionally while holding a modifier ("SHIFT", "CTRL")."""
    key: str
    modifier: str | None = None

    @property
    def is_modified(self) -> bool:
        return self.modifier is not None

    def __str__(self):
        if self.modifier:
            return f"{self.modifier.lower()}+{self.key.lower()}"
        return self.key.lower()


# ---------- Where Winds Meet ----------
# One 12-entry table per band, indexed by pitch class (C first).

WWM_HIGH_MAP = (
    Key("Q"),                   # do
    Key("Q", "SHIFT"),          # do sharp
    Key("W"),                   # re
    Key("E", "CTRL"),           # mi flat
    Key("E"),                   # mi
    Key("R"),                   # fa
    Key("R", "SHIFT"),          # fa sharp
    Key("T"),                   # so
    Key("T", "SHIFT"),          # so sharp
    Key("Y"),                   # la
    Key("U", "CTRL"),           # ti flat
    Key("U"),                   # ti
)

WWM_MEDIUM_MAP = (
    Key("A"),
    Key("A", "SHIFT"),
    Key("S"),
    Key("D", "CTRL"),
    Key("D"),
    Key("F"),
    Key("F", "SHIFT"),
    Key("G"),
    Key("G", "SHIFT"),
    Key("H"),
    Key("J", "CTRL"),
    Key("J"),
)

WWM_LOW_MAP = (
    Key("Z"),
    Key("Z", "SHIFT"),
    Key("X"),
    Key("D", "CTRL"),
    Key("C"),
    Key("V"),
    Key("V", "SHIFT"),
    Key("B"),
    Key("B", "SHIFT"),
    Key("N"),
    Key("M", "CTRL"),
    Key("M"),
)

WWM_MEDIUM_START = 72   # C5
WWM_HIGH_START = 84     # C6

# ---------- Genshin Impact ----------
# Naturals only, three octaves from C4.

GENSHIN_KEYBOARD_MAP = {
    # C6 - B6 (q-u row)
    84: Key("Q"), 86: Key("W"), 88: Key("E"), 89: Key("R"),
    91: Key("T"), 93: Key("Y"), 95: Key("U"),
    # C5 - B5 (a-j row)
    72: Key("A"), 74: Key("S"), 76: Key("D"), 77: Key("F"),
    79: Key("G"), 81: Key("H"), 83: Key("J"),
    # C4 - B4 (z-m row)
    60: Key("Z"), 62: Key("X"), 64: Key("C"), 65: Key("V"),
    67: Key("B"), 69: Key("N"), 71: Key("M"),
}


class GameProfile(Enum):
    WWM = "wwm"
    GENSHIN = "genshin"


PROFILE_ALIASES = {
    "wwm": GameProfile.WWM,
    "wherewindmeet": GameProfile.WWM,
    "where winds meet": GameProfile.WWM,
    "genshin": GameProfile.GENSHIN,
    "genshin impact": GameProfile.GENSHIN,
}


def resolve_profile(name) -> GameProfile:
    if isinstance(name, GameProfile):
        return name
    profile = PROFILE_ALIASES.get((name or "").strip().lower())
    if profile is None:
        logger.warning("Unknown game %r, using WWM mapping", name)
        return GameProfile.WWM
    return profile


def clamp_pitch(pitch: int) -> int:
    return max(MIDI_MIN, min(MIDI_MAX, pitch))


def wwm_key(pitch: int) -> Key:
    if pitch >= WWM_HIGH_START:
        table = WWM_HIGH_MAP
    elif pitch >= WWM_MEDIUM_START:
        table = WWM_MEDIUM_MAP
    else:
        table = WWM_LOW_MAP
    return table[pitch % 12]


def pitch_to_key(profile: GameProfile, pitch: int) -> Key | None:
    """
    Map a MIDI pitch to the key for the given game.

    The pitch is clamped to 0-127 first. Returns None when the game has
    no key for it.
    """
    pitch = clamp_pitch(pitch)
    if profile is GameProfile.GENSHIN:
        return GENSHIN_KEYBOARD_MAP.get(pitch)
    return wwm_key(pitch)


def note_name(pitch: int) -> str:
    return NOTE_NAMES[pitch % 12]


def note_full_name(pitch: int) -> str:
    octave = pitch // 12 - 1
    return f"{NOTE_NAMES[pitch % 12]}{octave}"


class KeyMapper:
    def __init__(self, game="wwm"):
        self.game = game
        self.profile = resolve_profile(game)

    def map(self, pitch: int) -> Key | None:
        return pitch_to_key(self.profile, pitch)
