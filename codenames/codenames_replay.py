"""Replay a recorded game through the live reducer, for timed playback."""

from __future__ import annotations

import asyncio
import logging
import warnings
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable

from engine.errors import ReplayDivergence

from .codenames_board import create_board, find_index
from .codenames_game import CodenamesGame
from .codenames_moves import GuessOutcome
from .codenames_record import SerializedGame
from .codenames_state import Clue, GameState, GuessProposal, Phase, SKIP_WORD, STARTING_TEAM

logger = logging.getLogger(__name__)


class SnapshotKind(str, Enum):
    GAME_START = "game_start"
    CLUE_SHOWN = "clue_shown"
    GUESS_REVEALED = "guess_revealed"
    TURN_SWITCHED = "turn_switched"
    GAME_ENDED = "game_ended"


PAUSE_MS: dict[SnapshotKind, int] = {
    SnapshotKind.GAME_START: 2000,
    SnapshotKind.CLUE_SHOWN: 2000,
    SnapshotKind.GUESS_REVEALED: 2000,
    SnapshotKind.TURN_SWITCHED: 1000,
    SnapshotKind.GAME_ENDED: 0,
}


@dataclass(frozen=True)
class ReplaySnapshot:
    """Full state after one presentation-relevant event."""

    kind: SnapshotKind
    state: GameState
    pause_ms: int
    turn_index: int | None = None
    guess_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "pause_ms": self.pause_ms,
            "turn_index": self.turn_index,
            "guess_index": self.guess_index,
            "state": self.state.to_dict(),
        }


@dataclass(frozen=True)
class Divergence:
    """A point where the record disagrees with the rules."""

    kind: str
    message: str
    turn_index: int | None = None
    guess_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "turn_index": self.turn_index,
            "guess_index": self.guess_index,
        }


@dataclass(frozen=True)
class ReplayRun:
    snapshots: tuple[ReplaySnapshot, ...]
    divergences: tuple[Divergence, ...]
    final_state: GameState

    @property
    def consistent(self) -> bool:
        return not self.divergences

    def to_dict(self) -> dict[str, Any]:
        return {
            "snapshots": [snapshot.to_dict() for snapshot in self.snapshots],
            "divergences": [divergence.to_dict() for divergence in self.divergences],
            "consistent": self.consistent,
        }


class _Replayer:
    def __init__(self, record: SerializedGame, game: CodenamesGame):
        self.record = record
        self.game = game
        self.snapshots: list[ReplaySnapshot] = []
        self.divergences: list[Divergence] = []

    def snapshot(self, kind: SnapshotKind, state: GameState, turn_index: int | None = None, guess_index: int | None = None) -> None:
        self.snapshots.append(ReplaySnapshot(kind, state, PAUSE_MS[kind], turn_index, guess_index))

    def diverge(self, kind: str, message: str, turn_index: int | None = None, guess_index: int | None = None) -> None:
        divergence = Divergence(kind, message, turn_index, guess_index)
        self.divergences.append(divergence)
        logger.warning("Replay divergence (%s): %s", kind, message)
        warnings.warn(ReplayDivergence(message), stacklevel=3)

    def run(self) -> ReplayRun:
        options = self.record.initial_options
        cards = create_board(options.words, options.card_types)
        state = GameState(cards=cards, current_team=STARTING_TEAM, phase=Phase.AWAITING_CLUE)
        self.snapshot(SnapshotKind.GAME_START, state)

        for turn_index, turn in enumerate(self.record.history):
            if state.over:
                self.diverge("turn_after_game_over", f"Turn {turn_index} was recorded after the game ended.", turn_index)
                break
            if turn.team is not state.current_team:
                self.diverge(
                    "wrong_team",
                    f"Turn {turn_index} is recorded for {turn.team.value}, but it was {state.current_team.value}'s turn.",
                    turn_index,
                )
                state = replace(state, current_team=turn.team)

            clue = Clue(team=turn.team, word=turn.clue.word, number=turn.clue.number, reasoning=turn.clue.reasoning)
            state = self.game.apply_clue(state, clue)
            self.snapshot(SnapshotKind.CLUE_SHOWN, state, turn_index)

            for guess_index, guess in enumerate(turn.guesses):
                state = self._replay_guess(state, guess, turn_index, guess_index)

            if state.phase is Phase.AWAITING_GUESS:
                # Records may stop a turn with budget left; show it as switched.
                logger.debug("Turn %d ended with %d guesses left", turn_index, state.guesses_remaining)
                state = replace(state, phase=Phase.TURN_END_PENDING)
            if state.phase is Phase.TURN_END_PENDING:
                state = self.game.end_turn(state)
                self.snapshot(SnapshotKind.TURN_SWITCHED, state, turn_index)

        return self._finish(state)

    def _replay_guess(self, state: GameState, guess: Any, turn_index: int, guess_index: int) -> GameState:
        if state.phase is not Phase.AWAITING_GUESS:
            self.diverge(
                "guess_after_turn_end",
                f"Guess {guess.word!r} was recorded after turn {turn_index} had already ended.",
                turn_index,
                guess_index,
            )
            return state

        if guess.word.strip().upper() == SKIP_WORD:
            resolution = self.game.apply_guess(state, GuessProposal(word=None, skip=True, reasoning=guess.reasoning))
            if resolution.outcome is GuessOutcome.IGNORED_SKIP:
                self.diverge("illegal_skip", f"Turn {turn_index} skips before any guess.", turn_index, guess_index)
            return resolution.state

        if find_index(state.cards, guess.word) is None:
            self.diverge("unknown_word", f"Guess {guess.word!r} is not on the board.", turn_index, guess_index)
            return state

        resolution = self.game.apply_guess(state, GuessProposal(word=guess.word, reasoning=guess.reasoning))
        if resolution.outcome.discarded:
            self.diverge("already_revealed", f"Guess {guess.word!r} was already revealed.", turn_index, guess_index)
            return state

        replayed = resolution.state.history[-1].guesses[-1].was_correct
        if replayed != guess.was_correct:
            self.diverge(
                "correctness_mismatch",
                f"Guess {guess.word!r} is recorded as wasCorrect={guess.was_correct}, replay says {replayed}.",
                turn_index,
                guess_index,
            )
        self.snapshot(SnapshotKind.GUESS_REVEALED, resolution.state, turn_index, guess_index)
        return resolution.state

    def _finish(self, state: GameState) -> ReplayRun:
        record = self.record
        winner = record.winner
        if state.winner is not winner:
            self.diverge(
                "winner_mismatch",
                f"Record says winner={getattr(winner, 'value', None)}, replay says {getattr(state.winner, 'value', None)}.",
            )
        recorded_scores = (record.final_score.red, record.final_score.blue)
        if (state.red_score, state.blue_score) != recorded_scores:
            self.diverge(
                "score_mismatch",
                f"Record says red {recorded_scores[0]} / blue {recorded_scores[1]}, "
                f"replay says red {state.red_score} / blue {state.blue_score}.",
            )

        # The final snapshot always shows what the record claims.
        final_state = replace(
            state,
            phase=Phase.GAME_OVER,
            winner=winner,
            red_score=recorded_scores[0],
            blue_score=recorded_scores[1],
            active_clue=None,
            guesses_remaining=0,
            termination_reason=state.termination_reason or "recorded",
        )
        self.snapshot(SnapshotKind.GAME_ENDED, final_state)
        return ReplayRun(
            snapshots=tuple(self.snapshots),
            divergences=tuple(self.divergences),
            final_state=final_state,
        )


def replay(record: SerializedGame, *, game: CodenamesGame | None = None) -> ReplayRun:
    """Rebuild every snapshot of a recorded game without any provider.

    Divergences are collected, logged and issued as `ReplayDivergence`
    warnings; replay always completes.
    """
    return _Replayer(record, game or CodenamesGame()).run()


async def play_back(
    run: ReplayRun,
    on_snapshot: Callable[[ReplaySnapshot], Awaitable[None] | None],
    *,
    speed: float = 1.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> None:
    """Hand snapshots to `on_snapshot`, pausing between them.

    `speed` scales the pauses; 0 disables them.
    """
    if speed < 0:
        raise ValueError("speed must be >= 0.")
    for snapshot in run.snapshots:
        result = on_snapshot(snapshot)
        if asyncio.iscoroutine(result):
            await result
        if speed > 0 and snapshot.pause_ms > 0:
            await sleep(snapshot.pause_ms / 1000.0 / speed)
