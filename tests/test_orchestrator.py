"""Turn orchestrator: full games, halts, resumption and cancellation."""

from __future__ import annotations

import asyncio
import json

import pytest

from codenames.codenames_game import CodenamesGame
from codenames.codenames_record import GameRecorder, SerializedGame
from codenames.codenames_state import GameState, Phase, Role, Team
from engine.errors import ProviderTransportFailure
from engine.events import EventType
from engine.orchestrator import (
    HALT_GUESS_REQUEST_CAP,
    HALT_MAX_TURNS,
    HALT_PROVIDER_FAILURE,
    OrchestratorConfig,
    TurnOrchestrator,
)
from engine.providers.adapter import ProviderFailure
from engine.providers.random_adapter import RandomAdapter
from engine.providers.scripted import ScriptedAdapter

RED_WORDS = ("WAVE", "BANK", "CASTLE", "DRAGON", "EAGLE", "FOREST", "GHOST", "HONEY", "ISLAND")
BLUE_WORDS = ("BOAT", "KNIGHT", "LEMON", "MOON", "NURSE", "PILOT", "PIANO", "QUEEN")
NEUTRAL_WORDS = ("ROBOT", "SHARK", "TABLE", "UNICORN", "VIOLIN", "WHALE", "YACHT")
TYPES = ["red"] * 9 + ["blue"] * 8 + ["neutral"] * 7 + ["assassin"]


def _new_state() -> GameState:
    return CodenamesGame().new_game(RED_WORDS + BLUE_WORDS + NEUTRAL_WORDS + ("ZOMBIE",), TYPES)


def _winning_script() -> ScriptedAdapter:
    # Red: two guesses on a 1-clue, blue: neutral, red: clears the board.
    return ScriptedAdapter(
        clues=[("OCEAN", 1), ("SKY", 1), ("EVERYTHING", 0)],
        guesses=["WAVE", "BANK", "ROBOT", *RED_WORDS[2:]],
    )


def _failure(role: Role) -> ProviderFailure:
    return ProviderFailure(role=role, attempts=3, cause=ProviderTransportFailure("provider unavailable"))


class _CountingRecorder:
    def __init__(self) -> None:
        self.inner = GameRecorder()
        self.calls = 0

    def record(self, state: GameState) -> SerializedGame:
        self.calls += 1
        return self.inner.record(state)


def test_scripted_game_runs_to_red_win() -> None:
    recorder = _CountingRecorder()
    orchestrator = TurnOrchestrator(CodenamesGame(), _winning_script(), recorder=recorder, game_id="scripted")
    run = asyncio.run(orchestrator.run_game(_new_state()))

    assert run.over
    assert not run.halted
    assert run.state.winner is Team.RED
    assert run.state.termination_reason == "all_words_revealed"
    assert run.state.scores() == {"red": 9, "blue": 0}
    assert run.turns_played == 3
    assert recorder.calls == 1
    assert run.record is not None and run.record.winner is Team.RED

    assert [event.event_type for event in run.events] == [
        EventType.GAME_START,
        EventType.CLUE,
        EventType.GUESS,
        EventType.GUESS,
        EventType.TURN_END,
        EventType.CLUE,
        EventType.GUESS,
        EventType.TURN_END,
        EventType.CLUE,
        *[EventType.GUESS] * 7,
        EventType.GAME_OVER,
    ]
    assert run.events[4].payload["next_team"] == "blue"
    assert run.events[6].payload["outcome"] == "neutral"
    assert all(event.game_id == "scripted" for event in run.events)
    assert run.to_dict()["winner"] == "red"


def test_finished_game_is_not_played_again() -> None:
    recorder = _CountingRecorder()
    orchestrator = TurnOrchestrator(CodenamesGame(), _winning_script(), recorder=recorder)
    finished = asyncio.run(orchestrator.run_game(_new_state())).state

    again = asyncio.run(orchestrator.run_game(finished))
    assert again.events == []
    assert again.turns_played == 0
    assert again.state is finished
    assert recorder.calls == 1


def test_clue_failure_halts_without_advancing_and_can_resume() -> None:
    state = _new_state()
    adapter = ScriptedAdapter(clues=[_failure(Role.CLUE_GIVER)])
    run = asyncio.run(TurnOrchestrator(CodenamesGame(), adapter).run_game(state))

    assert run.halted
    assert run.halt_reason == HALT_PROVIDER_FAILURE
    assert run.failure is not None and run.failure.role is Role.CLUE_GIVER
    assert run.state == state
    assert run.state.current_team is Team.RED
    assert [event.event_type for event in run.events][-2:] == [EventType.PROVIDER_FAILURE, EventType.HALT]
    assert "provider unavailable" in run.events[-2].payload["error"]

    resumed = asyncio.run(TurnOrchestrator(CodenamesGame(), _winning_script()).run_game(run.state))
    assert resumed.over
    assert resumed.state.winner is Team.RED


def test_guess_failure_mid_turn_keeps_progress() -> None:
    adapter = ScriptedAdapter(clues=[("OCEAN", 2)], guesses=["WAVE", _failure(Role.GUESSER)])
    orchestrator = TurnOrchestrator(CodenamesGame(), adapter)
    turn = asyncio.run(orchestrator.play_turn(_new_state()))

    assert turn.halted
    assert turn.state.phase is Phase.AWAITING_GUESS
    assert turn.state.current_team is Team.RED
    assert turn.state.red_score == 1
    assert turn.state.guesses_remaining == 2

    adapter.queue_guess("SHARK")
    resumed = asyncio.run(orchestrator.play_turn(turn.state))
    assert not resumed.halted
    assert resumed.state.current_team is Team.BLUE
    assert resumed.state.phase is Phase.AWAITING_CLUE
    assert [guess.word for guess in resumed.state.history[-1].guesses] == ["WAVE", "SHARK"]
    assert adapter.clue_requests == 1


def test_discarded_responses_hit_the_request_cap() -> None:
    adapter = ScriptedAdapter(clues=[("OCEAN", 1)], guesses=["NOT-A-CARD"] * 3)
    config = OrchestratorConfig(max_guess_requests=3)
    run = asyncio.run(TurnOrchestrator(CodenamesGame(), adapter, config=config).run_game(_new_state()))

    assert run.halted
    assert run.halt_reason == HALT_GUESS_REQUEST_CAP
    assert run.state.current_team is Team.RED
    assert run.state.phase is Phase.AWAITING_GUESS
    assert run.state.guesses_remaining == 2
    guess_events = [event for event in run.events if event.event_type is EventType.GUESS]
    assert [event.payload["outcome"] for event in guess_events] == ["unresolved"] * 3


def test_max_turns_halts_between_turns() -> None:
    adapter = ScriptedAdapter(clues=[("OCEAN", 1)], guesses=["SHARK"])
    config = OrchestratorConfig(max_turns=1)
    run = asyncio.run(TurnOrchestrator(CodenamesGame(), adapter, config=config).run_game(_new_state()))

    assert run.halted
    assert run.halt_reason == HALT_MAX_TURNS
    assert run.turns_played == 1
    assert run.state.current_team is Team.BLUE
    assert run.state.phase is Phase.AWAITING_CLUE


def test_pacing_pauses_after_clues_and_guesses() -> None:
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    orchestrator = TurnOrchestrator(
        CodenamesGame(),
        _winning_script(),
        config=OrchestratorConfig(pacing_delay_sec=0.5),
        sleep=fake_sleep,
    )
    asyncio.run(orchestrator.run_game(_new_state()))

    # Three clues and every guess except the one that ended the game.
    assert delays == [0.5] * 12


def test_cancellation_abandons_the_inflight_request() -> None:
    published: list[GameState] = []

    async def scenario() -> None:
        never = asyncio.Event()

        async def hang(_: GameState):
            await never.wait()

        adapter = ScriptedAdapter(clues=[("OCEAN", 1)], guess_policy=hang)
        orchestrator = TurnOrchestrator(CodenamesGame(), adapter, on_state=published.append)
        task = asyncio.create_task(orchestrator.run_game(_new_state()))
        while adapter.guess_requests == 0:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert len(published) == 1
    last = published[-1]
    assert last.phase is Phase.AWAITING_GUESS
    assert last.active_clue is not None and last.active_clue.word == "OCEAN"

    resumed = asyncio.run(
        TurnOrchestrator(
            CodenamesGame(),
            ScriptedAdapter(clues=[("SKY", 1), ("EVERYTHING", 0)], guesses=["SHARK", "BOAT", "KNIGHT", *RED_WORDS]),
        ).run_game(last)
    )
    assert resumed.state.winner is Team.RED


def test_event_callback_errors_do_not_stop_the_game() -> None:
    def broken(_event) -> None:
        raise RuntimeError("display crashed")

    run = asyncio.run(TurnOrchestrator(CodenamesGame(), _winning_script(), on_event=broken).run_game(_new_state()))
    assert run.over


def test_event_log_is_written_as_jsonl(tmp_path) -> None:
    config = OrchestratorConfig(event_log_dir=tmp_path)
    orchestrator = TurnOrchestrator(CodenamesGame(), _winning_script(), config=config, game_id="logged")
    run = asyncio.run(orchestrator.run_game(_new_state()))

    assert run.log_path == str(tmp_path / "logged.jsonl")
    lines = (tmp_path / "logged.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == len(run.events)
    first, last = json.loads(lines[0]), json.loads(lines[-1])
    assert first["event_type"] == "game_start"
    assert last["event_type"] == "game_over"
    assert last["payload"]["winner"] == "red"
    assert last["payload"]["state_digest"] == run.state.state_digest()


def test_random_adapter_games_complete() -> None:
    game = CodenamesGame()
    for seed in (11, 12, 13):
        orchestrator = TurnOrchestrator(game, RandomAdapter(seed=seed), recorder=GameRecorder())
        run = asyncio.run(orchestrator.run_game(game.new_game(seed=seed)))
        assert run.over
        assert run.state.winner is not None
        assert run.record is not None
        assert run.turns_played <= 25


class _FullDiskSink:
    def write(self, record: SerializedGame) -> str:
        raise OSError("disk full")


def test_failing_record_sink_still_finishes_and_returns_the_record() -> None:
    recorder = GameRecorder(_FullDiskSink())
    published: list[GameState] = []
    orchestrator = TurnOrchestrator(CodenamesGame(), _winning_script(), recorder=recorder, on_state=published.append)
    run = asyncio.run(orchestrator.run_game(_new_state()))

    assert run.over
    assert run.record is not None
    assert run.record.winner is Team.RED
    assert recorder.last_location is None
    assert run.events[-1].event_type is EventType.GAME_OVER
    assert run.events[-1].payload["recorded"] is True
    assert published[-1].over


def test_failing_recorder_does_not_lose_the_game_over() -> None:
    class _BrokenRecorder:
        def record(self, state: GameState) -> SerializedGame:
            raise RuntimeError("recorder exploded")

    run = asyncio.run(
        TurnOrchestrator(CodenamesGame(), _winning_script(), recorder=_BrokenRecorder()).run_game(_new_state())
    )

    assert run.over
    assert run.record is None
    assert run.events[-1].event_type is EventType.GAME_OVER
    assert run.events[-1].payload["recorded"] is False
