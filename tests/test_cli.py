"""CLI smoke tests: word files, offline play and replay."""

from __future__ import annotations

import json

from cli import build_parser, main, read_words


def test_read_words_accepts_lines_commas_and_comments(tmp_path) -> None:
    path = tmp_path / "words.txt"
    path.write_text("# board\nWAVE, BANK\nCASTLE  # castle\n\n DRAGON \n", encoding="utf-8")
    assert read_words(path) == ["WAVE", "BANK", "CASTLE", "DRAGON"]


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["play", "--seed", "4"])
    assert args.command == "play"
    assert args.seed == 4
    assert args.max_turns == 200
    assert args.pacing == 0.0

    args = build_parser().parse_args(["replay", "game.json", "--no-pacing"])
    assert args.record == "game.json"
    assert args.no_pacing is True


def test_random_game_records_and_replays(tmp_path, capsys, monkeypatch) -> None:
    monkeypatch.delenv("CODENAMES_MODEL", raising=False)
    assert main(["play", "--provider", "random", "--seed", "2", "--record-dir", str(tmp_path)]) == 0
    output = capsys.readouterr().out
    assert "Saved record:" in output

    (record_path,) = tmp_path.glob("codenames-*.json")
    winner = json.loads(record_path.read_text(encoding="utf-8"))["winner"]
    assert main(["replay", str(record_path), "--no-pacing"]) == 0
    assert f"Game over: {winner} wins" in capsys.readouterr().out


def test_bad_word_file_is_reported(tmp_path, capsys) -> None:
    path = tmp_path / "words.txt"
    path.write_text("ONE\nTWO\n", encoding="utf-8")
    assert main(["play", "--provider", "random", "--words-file", str(path)]) == 2
    assert "Cannot start game" in capsys.readouterr().err
