import pytest

from midi_macro.song import MidiSong, NoteOffMessage, NoteOnMessage, TempoMessage

TWO_NOTES_CSV = """\
0, 0, Header, 1, 2, 480
1, 0, Start_track
1, 0, Title_t, "Two notes"
1, 0, Tempo, 500000
1, 0, End_track
2, 0, Start_track
2, 0, Program_c, 0, 0
2, 0, Note_on_c, 0, 60, 100
2, 240, Note_off_c, 0, 60, 0
2, 480, Note_on_c, 0, 61, 100
2, 720, Note_on_c, 0, 61, 0
2, 720, End_track
0, 0, End_of_file
"""

TWO_NOTES_MCR = [
    "Keyboard : Z : KeyDown",
    "DELAY : 2",
    "Keyboard : Z : KeyUp",
    "DELAY : 500",
    "Keyboard : ShiftLeft : KeyDown",
    "DELAY : 2",
    "Keyboard : Z : KeyDown",
    "Keyboard : Z : KeyUp",
    "Keyboard : ShiftLeft : KeyUp",
]


@pytest.fixture
def two_notes_song():
    return MidiSong(
        ticks_per_quarter=480,
        tracks=[
            [(0, TempoMessage(500000))],
            [
                (0, NoteOnMessage(60, 100)),
                (240, NoteOffMessage(60)),
                (240, NoteOnMessage(61, 100)),
                (240, NoteOnMessage(61, 0)),
            ],
        ],
    )


@pytest.fixture
def two_notes_csv(tmp_path):
    path = tmp_path / "two_notes.csv"
    path.write_text(TWO_NOTES_CSV, encoding="utf-8")
    return path
