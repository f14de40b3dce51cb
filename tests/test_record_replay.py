"""Game records: projection, persistence, loading, and replay through the reducer."""

from __future__ import annotations

import asyncio
import json
import warnings
from datetime import datetime, timezone

import pytest

from codenames.codenames_game import CodenamesGame
from codenames.codenames_record import GameRecorder, JsonFileSink, load_record, to_record
from codenames.codenames_replay import PAUSE_MS, SnapshotKind, play_back, replay
from codenames.codenames_state import Clue, GameState, GuessProposal, Phase, Team
from engine.errors import IllegalTransitionError, ReplayDivergence

RED_WORDS = ("WAVE", "BANK", "CASTLE", "DRAGON", "EAGLE", "FOREST", "GHOST", "HONEY", "ISLAND")
BLUE_WORDS = ("BOAT", "KNIGHT", "LEMON", "MOON", "NURSE", "PILOT", "PIANO", "QUEEN")
NEUTRAL_WORDS = ("ROBOT", "SHARK", "TABLE", "UNICORN", "VIOLIN", "WHALE", "YACHT")
TYPES = ["red"] * 9 + ["blue"] * 8 + ["neutral"] * 7 + ["assassin"]
WHEN = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _play(state: GameState, clue: tuple[str, int], guesses) -> GameState:
    game = CodenamesGame()
    state = game.apply_clue(state, Clue(team=state.current_team, word=clue[0], number=clue[1], reasoning="because"))
    for word in guesses:
        state = game.apply_guess(state, GuessProposal(word=word)).state
    return game.end_turn(state)


def _finished_state() -> GameState:
    state = CodenamesGame().new_game(RED_WORDS + BLUE_WORDS + NEUTRAL_WORDS + ("ZOMBIE",), TYPES)
    state = _play(state, ("OCEAN", 1), ["WAVE", "BANK"])
    state = _play(state, ("SKY", 1), ["ROBOT"])
    return _play(state, ("EVERYTHING", 0), RED_WORDS[2:])


def test_record_uses_camel_case_keys() -> None:
    data = to_record(_finished_state(), now=WHEN).to_dict()

    assert set(data) == {"date", "initialOptions", "winner", "finalScore", "history", "cards", "stateDigest"}
    assert data["winner"] == "red"
    assert data["finalScore"] == {"red": 9, "blue": 0}
    assert data["initialOptions"]["cardTypes"][:2] == ["red", "red"]
    first_turn = data["history"][0]
    assert first_turn["team"] == "red"
    assert first_turn["clue"] == {"word": "OCEAN", "number": 1, "reasoning": "because"}
    assert first_turn["guesses"] == [{"word": "WAVE", "wasCorrect": True}, {"word": "BANK", "wasCorrect": True}]
    assert data["history"][1]["guesses"] == [{"word": "ROBOT", "wasCorrect": False}]
    assert all(card["revealed"] for card in data["cards"] if card["type"] == "red")


def test_only_finished_games_are_recorded() -> None:
    with pytest.raises(IllegalTransitionError):
        to_record(CodenamesGame().new_game(seed=1))


def test_file_sink_writes_and_loader_reads_back(tmp_path) -> None:
    recorder = GameRecorder(JsonFileSink(tmp_path))
    record = recorder.record(_finished_state(), now=WHEN)

    expected = tmp_path / "codenames-2024-05-01T12-00-00-000000Z.json"
    assert recorder.last_location == str(expected)
    assert json.loads(expected.read_text(encoding="utf-8"))["finalScore"] == {"red": 9, "blue": 0}

    expected_dict = record.to_dict()
    assert load_record(expected).to_dict() == expected_dict
    assert load_record(str(expected)).to_dict() == expected_dict
    assert load_record(expected.read_text(encoding="utf-8")).to_dict() == expected_dict
    assert load_record(expected_dict).to_dict() == expected_dict


def test_loader_accepts_older_records() -> None:
    data = to_record(_finished_state(), now=WHEN).to_dict()
    del data["stateDigest"]
    data["history"][0]["guessesReasoning"] = "both are sea things"
    data["somethingElse"] = True

    record = load_record(data)
    assert record.state_digest is None
    assert record.history[0].guesses_reasoning == "both are sea things"


def test_replay_reproduces_the_recorded_game() -> None:
    state = _finished_state()
    record = to_record(state, now=WHEN)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        run = replay(record)

    assert run.consistent
    assert run.final_state.winner is Team.RED
    assert run.final_state.scores() == {"red": 9, "blue": 0}
    assert run.final_state.cards == state.cards
    assert [snapshot.kind for snapshot in run.snapshots] == [
        SnapshotKind.GAME_START,
        SnapshotKind.CLUE_SHOWN,
        SnapshotKind.GUESS_REVEALED,
        SnapshotKind.GUESS_REVEALED,
        SnapshotKind.TURN_SWITCHED,
        SnapshotKind.CLUE_SHOWN,
        SnapshotKind.GUESS_REVEALED,
        SnapshotKind.TURN_SWITCHED,
        SnapshotKind.CLUE_SHOWN,
        *[SnapshotKind.GUESS_REVEALED] * 7,
        SnapshotKind.GAME_ENDED,
    ]
    assert run.snapshots[4].state.current_team is Team.BLUE
    assert run.snapshots[-1].pause_ms == 0


def test_turn_stopped_early_switches_without_divergence() -> None:
    data = to_record(_finished_state(), now=WHEN).to_dict()
    # Blue's single neutral guess removed: the turn ends with budget left.
    data["history"][1]["guesses"] = []
    run = replay(load_record(data))

    assert run.consistent
    assert run.snapshots[6].state.current_team is Team.RED


def test_tampered_record_reports_divergences_and_shows_recorded_result() -> None:
    data = to_record(_finished_state(), now=WHEN).to_dict()
    data["history"][0]["guesses"][1]["wasCorrect"] = False
    data["winner"] = "blue"
    data["finalScore"] = {"red": 2, "blue": 3}

    with pytest.warns(ReplayDivergence):
        run = replay(load_record(data))

    kinds = [divergence.kind for divergence in run.divergences]
    assert kinds == ["correctness_mismatch", "winner_mismatch", "score_mismatch"]
    assert run.divergences[0].turn_index == 0
    assert run.divergences[0].guess_index == 1
    assert not run.consistent

    final = run.snapshots[-1].state
    assert final.phase is Phase.GAME_OVER
    assert final.winner is Team.BLUE
    assert final.scores() == {"red": 2, "blue": 3}


def test_unknown_words_and_wrong_teams_are_flagged() -> None:
    data = to_record(_finished_state(), now=WHEN).to_dict()
    data["history"][1]["team"] = "red"
    data["history"][2]["guesses"].insert(0, {"word": "PLUTO", "wasCorrect": True})

    with pytest.warns(ReplayDivergence):
        run = replay(load_record(data))

    kinds = [divergence.kind for divergence in run.divergences]
    assert "wrong_team" in kinds
    assert "unknown_word" in kinds


def test_play_back_paces_snapshots_by_speed() -> None:
    run = replay(to_record(_finished_state(), now=WHEN))
    seen: list[SnapshotKind] = []
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    asyncio.run(play_back(run, lambda snapshot: seen.append(snapshot.kind), speed=2.0, sleep=fake_sleep))

    assert seen == [snapshot.kind for snapshot in run.snapshots]
    assert len(delays) == len(run.snapshots) - 1
    assert delays[0] == PAUSE_MS[SnapshotKind.GAME_START] / 1000.0 / 2.0
    assert sum(delays) == pytest.approx(15.0)

    delays.clear()
    asyncio.run(play_back(run, lambda snapshot: None, speed=0, sleep=fake_sleep))
    assert delays == []
    with pytest.raises(ValueError):
        asyncio.run(play_back(run, lambda snapshot: None, speed=-1, sleep=fake_sleep))


def test_sink_failure_still_returns_the_record() -> None:
    class _FullDisk:
        def write(self, record) -> str:
            raise OSError("disk full")

    recorder = GameRecorder(_FullDisk())
    record = recorder.record(_finished_state(), now=WHEN)

    assert record.winner is Team.RED
    assert recorder.last_location is None
