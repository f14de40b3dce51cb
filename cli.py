"""Command line entrypoint: play an autonomous game or replay a saved one."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from codenames.codenames_game import CodenamesGame
from codenames.codenames_record import GameRecorder, JsonFileSink, load_record
from codenames.codenames_replay import ReplaySnapshot, SnapshotKind, play_back, replay
from codenames.codenames_state import BOARD_SIZE, GameState
from codenames.codenames_words import DEFAULT_WORDS
from engine.errors import BoardSetupError
from engine.events import EventType, GameEvent
from engine.orchestrator import OrchestratorConfig, TurnOrchestrator
from engine.providers.env_utils import GameSettings
from engine.serialize import json_dumps
from server.provider_factory import create_game_adapter


def read_words(path: str | Path) -> list[str]:
    """Words from a file, one per line or comma separated; `#` starts a comment."""
    words: list[str] = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.split("#", 1)[0]
        words.extend(chunk.strip() for chunk in line.split(",") if chunk.strip())
    return words


class _ConsoleReporter:
    def __init__(self, game: CodenamesGame, *, show_key: bool):
        self.game = game
        self.show_key = show_key
        self.state: GameState | None = None

    def on_state(self, state: GameState) -> None:
        self.state = state

    def on_event(self, event: GameEvent) -> None:
        payload = event.payload
        if event.event_type is EventType.CLUE:
            clue = payload["clue"]
            print(f"[{clue['team']}] clue: {clue['word']} {clue['number']}")
        elif event.event_type is EventType.GUESS:
            proposal = payload["proposal"]
            label = "SKIP" if payload["outcome"] == "skipped" else proposal.get("word") or "SKIP"
            print(f"    guess: {label} -> {payload['outcome']}")
        elif event.event_type is EventType.PROVIDER_FAILURE:
            print(f"!! {payload['error']}")
        elif event.event_type in (EventType.TURN_END, EventType.GAME_OVER) and self.state is not None:
            print(self.game.render(self.state, show_key=self.show_key))
            print()


async def _play(args: argparse.Namespace) -> int:
    settings = GameSettings.from_env()
    game = CodenamesGame()
    words = None
    word_list: Sequence[str] = DEFAULT_WORDS
    if args.words_file:
        loaded = read_words(args.words_file)
        if len(loaded) == BOARD_SIZE:
            words = loaded
        else:
            word_list = loaded

    try:
        state = game.new_game(words, seed=args.seed, word_list=word_list)
    except BoardSetupError as exc:
        print(f"Cannot start game: {exc}", file=sys.stderr)
        return 2

    provider = {"type": args.provider or settings.provider}
    if args.model or settings.model:
        provider["model"] = args.model or settings.model
    record_dir = args.record_dir or settings.record_dir
    reporter = _ConsoleReporter(game, show_key=args.show_key)
    recorder = GameRecorder(JsonFileSink(record_dir) if record_dir else None)
    try:
        adapter = create_game_adapter(provider, settings=settings)
    except ValueError as exc:
        print(f"Cannot start game: {exc}", file=sys.stderr)
        return 2

    orchestrator = TurnOrchestrator(
        game,
        adapter,
        recorder=recorder,
        config=OrchestratorConfig(
            pacing_delay_sec=args.pacing,
            max_turns=args.max_turns,
            event_log_dir=args.log_dir,
        ),
        on_event=reporter.on_event,
        on_state=reporter.on_state,
    )
    print(game.render(state, show_key=args.show_key))
    print()
    run = await orchestrator.run_game(state)
    print(json_dumps(run.to_dict(), indent=2))
    if recorder.last_location:
        print(f"Saved record: {recorder.last_location}")
    return 0 if run.over else 1


def _print_snapshot(snapshot: ReplaySnapshot) -> None:
    state = snapshot.state
    if snapshot.kind is SnapshotKind.CLUE_SHOWN and state.active_clue is not None:
        print(f"[{state.current_team.value}] clue: {state.active_clue.word} {state.active_clue.number}")
    elif snapshot.kind is SnapshotKind.GUESS_REVEALED:
        guess = state.history[-1].guesses[-1]
        print(f"    guess: {guess.word} {'correct' if guess.was_correct else 'wrong'}")
    elif snapshot.kind is SnapshotKind.TURN_SWITCHED:
        print(f"  score red {state.red_score} / blue {state.blue_score}")
    elif snapshot.kind is SnapshotKind.GAME_ENDED:
        winner = state.winner.value if state.winner is not None else "nobody"
        print(f"Game over: {winner} wins (red {state.red_score} / blue {state.blue_score})")


async def _replay(args: argparse.Namespace) -> int:
    record = load_record(Path(args.record))
    run = replay(record)
    await play_back(run, _print_snapshot, speed=0.0 if args.no_pacing else args.speed)
    for divergence in run.divergences:
        print(f"divergence ({divergence.kind}): {divergence.message}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Autonomous LLM Codenames.")
    parser.add_argument("--log-level", default="INFO")
    subparsers = parser.add_subparsers(dest="command", required=True)

    play = subparsers.add_parser("play", help="Play a full game with model-backed teams.")
    play.add_argument("--words-file", default=None, help="25 board words, or a word list to deal from.")
    play.add_argument("--seed", type=int, default=None)
    play.add_argument("--provider", default=None, help="random, openai, anthropic, ollama or local.")
    play.add_argument("--model", default=None)
    play.add_argument("--record-dir", default=None)
    play.add_argument("--log-dir", default=None)
    play.add_argument("--max-turns", type=int, default=200)
    play.add_argument("--pacing", type=float, default=0.0, help="Seconds to pause after each clue and guess.")
    play.add_argument("--show-key", action="store_true")

    replay_parser = subparsers.add_parser("replay", help="Replay a saved game record.")
    replay_parser.add_argument("record")
    replay_parser.add_argument("--no-pacing", action="store_true")
    replay_parser.add_argument("--speed", type=float, default=1.0)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if args.command == "play":
        return asyncio.run(_play(args))
    return asyncio.run(_replay(args))


if __name__ == "__main__":
    raise SystemExit(main())
