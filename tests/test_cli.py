import os

import pytest

from midi_macro.cli import build_parser, choose_midi_file, main
from midi_macro.io_midicsv import csv_to_midi

from tests.conftest import TWO_NOTES_MCR


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.setattr(os, "environ", os.environ.copy())
    monkeypatch.chdir(tmp_path)
    for name in ("DEFAULT_GAME", "DEFAULT_TRANSPOSE", "OUTPUT_DIRECTORY", "TEMPO_MODE",
                 "DEFAULT_TEMPO_MULTIPLIER", "DEFAULT_MIN_NOTE_DURATION",
                 "MIN_DELAY_THRESHOLD", "KEY_PRESS_DELAY"):
        monkeypatch.delenv(name, raising=False)


def test_help_lists_options(capsys):
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["--help"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    for flag in ["--output", "--game", "--tempo-multiplier", "--min-duration", "--transpose", "--tempo-mode"]:
        assert flag in out


def test_main_converts_file(two_notes_csv, tmp_path):
    out = tmp_path / "two.mcr"
    assert main([str(two_notes_csv), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8").splitlines() == TWO_NOTES_MCR


def test_main_uses_explicit_options_in_default_name(two_notes_csv, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main([str(two_notes_csv), "--transpose", "12", "-g", "genshin"]) == 0
    lines = (tmp_path / "two_notes-transpose-12-game-genshin.mcr").read_text(encoding="utf-8").splitlines()
    # 72 -> A on genshin; 73 has no key there
    assert lines == ["Keyboard : A : KeyDown", "DELAY : 2", "Keyboard : A : KeyUp"]


def test_main_env_defaults(two_notes_csv, tmp_path, monkeypatch):
    monkeypatch.setenv("OUTPUT_DIRECTORY", str(tmp_path / "env_out"))
    monkeypatch.setenv("KEY_PRESS_DELAY", "4")
    assert main([str(two_notes_csv)]) == 0
    lines = (tmp_path / "env_out" / "two_notes.mcr").read_text(encoding="utf-8").splitlines()
    assert lines[1] == "DELAY : 4"


def test_main_missing_file_fails(tmp_path):
    assert main([str(tmp_path / "missing.mid")]) == 1


def test_main_bad_env_fails(two_notes_csv, monkeypatch):
    monkeypatch.setenv("DEFAULT_TEMPO_MULTIPLIER", "fast")
    assert main([str(two_notes_csv)]) == 1


def test_choose_midi_file(tmp_path):
    (tmp_path / "b.mid").write_bytes(b"")
    (tmp_path / "a.midi").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("x")

    picked = choose_midi_file(str(tmp_path), input_fn=lambda prompt: "2")
    assert picked.endswith("b.mid")


def test_choose_midi_file_rejects_bad_choice(tmp_path):
    (tmp_path / "a.mid").write_bytes(b"")
    with pytest.raises(ValueError):
        choose_midi_file(str(tmp_path), input_fn=lambda prompt: "7")


def test_main_interactive_without_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main([], input_fn=lambda prompt: "1") == 1


def test_main_reads_dotenv_in_working_directory(two_notes_csv, tmp_path):
    (tmp_path / ".env").write_text("KEY_PRESS_DELAY=9\nDEFAULT_GAME=genshin\n", encoding="utf-8")
    out = tmp_path / "two.mcr"
    assert main([str(two_notes_csv), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8").splitlines() == [
        "Keyboard : Z : KeyDown",
        "DELAY : 9",
        "Keyboard : Z : KeyUp",
    ]


def test_environment_wins_over_dotenv(two_notes_csv, tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("KEY_PRESS_DELAY=9\n", encoding="utf-8")
    monkeypatch.setenv("KEY_PRESS_DELAY", "3")
    out = tmp_path / "two.mcr"
    assert main([str(two_notes_csv), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8").splitlines()[1] == "DELAY : 3"


def test_choose_midi_file_closed_stdin(tmp_path):
    (tmp_path / "a.mid").write_bytes(b"")

    def closed(prompt):
        raise EOFError

    with pytest.raises(ValueError, match="no input"):
        choose_midi_file(str(tmp_path), input_fn=closed)


def test_main_interactive_closed_stdin_fails(tmp_path):
    (tmp_path / "a.mid").write_bytes(b"")

    def closed(prompt):
        raise EOFError

    assert main([], input_fn=closed) == 1


def test_main_interactive_ctrl_c_fails(tmp_path):
    (tmp_path / "a.mid").write_bytes(b"")

    def interrupted(prompt):
        raise KeyboardInterrupt

    assert main([], input_fn=interrupted) == 1


def test_save_csv_copies_midicsv_input(two_notes_csv, tmp_path):
    saved = tmp_path / "saved.csv"
    out = tmp_path / "two.mcr"
    assert main([str(two_notes_csv), "-o", str(out), "--save-csv", str(saved)]) == 0
    assert saved.read_text(encoding="utf-8") == two_notes_csv.read_text(encoding="utf-8")
    assert out.read_text(encoding="utf-8").splitlines() == TWO_NOTES_MCR


def test_save_csv_decodes_midi_input(two_notes_csv, tmp_path):
    midi_path = tmp_path / "two_notes.mid"
    csv_to_midi(two_notes_csv, midi_path)
    saved = tmp_path / "saved.csv"
    assert main([str(midi_path), "-o", str(tmp_path / "two.mcr"), "--save-csv", str(saved)]) == 0
    assert "Note_on_c, 0, 60, 100" in saved.read_text(encoding="utf-8")
