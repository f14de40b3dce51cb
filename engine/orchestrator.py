"""Async turn orchestrator driving Codenames games through a provider adapter."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol
from uuid import uuid4

from codenames.codenames_game import CodenamesGame
from codenames.codenames_record import SerializedGame
from codenames.codenames_state import GameState, Phase

from .events import EventType, GameEvent, write_jsonl
from .providers.adapter import ProviderAdapter, ProviderFailure
from .serialize import to_serializable

logger = logging.getLogger(__name__)

HALT_PROVIDER_FAILURE = "provider_failure"
HALT_GUESS_REQUEST_CAP = "guess_request_cap"
HALT_MAX_TURNS = "max_turns"


class Recorder(Protocol):
    """Receives the final state once, when a game ends."""

    def record(self, state: GameState) -> SerializedGame:
        """Project the final state into a persisted record."""


@dataclass(frozen=True)
class OrchestratorConfig:
    """Runtime configuration for game execution."""

    pacing_delay_sec: float = 0.0
    max_guess_requests: int = 100
    max_turns: int = 200
    event_log_dir: str | Path | None = None

    def __post_init__(self) -> None:
        if self.pacing_delay_sec < 0:
            raise ValueError("pacing_delay_sec must be >= 0.")
        if self.max_guess_requests < 1:
            raise ValueError("max_guess_requests must be >= 1.")
        if self.max_turns < 1:
            raise ValueError("max_turns must be >= 1.")


@dataclass(frozen=True)
class TurnRun:
    """Outcome of driving one turn as far as it would go."""

    state: GameState
    events: list[GameEvent] = field(default_factory=list)
    halted: bool = False
    halt_reason: str | None = None
    failure: ProviderFailure | None = None
    record: SerializedGame | None = None


@dataclass(frozen=True)
class GameRun:
    """Complete execution artifact for one run of the loop.

    A halted run leaves `state` stable and resumable: pass it back to
    `run_game` to retry.
    """

    game_id: str
    state: GameState
    events: list[GameEvent]
    turns_played: int
    halted: bool = False
    halt_reason: str | None = None
    failure: ProviderFailure | None = None
    record: SerializedGame | None = None
    log_path: str | None = None

    @property
    def over(self) -> bool:
        return self.state.over

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_id": self.game_id,
            "over": self.over,
            "winner": self.state.winner.value if self.state.winner is not None else None,
            "scores": self.state.scores(),
            "turns_played": self.turns_played,
            "halted": self.halted,
            "halt_reason": self.halt_reason,
            "failure": self.failure.to_dict() if self.failure is not None else None,
            "event_count": len(self.events),
            "log_path": self.log_path,
        }


class TurnOrchestrator:
    """Sequences clue, guesses and turn switch for one game.

    One provider request is outstanding at a time. States are immutable and
    only leave the loop between transitions (returned, or handed to
    `on_state`), so cancelling the task running `run_game` abandons the
    in-flight request without any later state landing.
    """

    def __init__(
        self,
        game: CodenamesGame,
        adapter: ProviderAdapter,
        *,
        recorder: Recorder | None = None,
        config: OrchestratorConfig | None = None,
        game_id: str | None = None,
        on_event: Callable[[GameEvent], None] | None = None,
        on_state: Callable[[GameState], None] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.game = game
        self.adapter = adapter
        self.recorder = recorder
        self.config = config or OrchestratorConfig()
        self.game_id = game_id or f"{game.game_name}-{uuid4().hex[:8]}"
        self.on_event = on_event
        self.on_state = on_state
        self._sleep = sleep

    async def run_game(self, state: GameState, *, log_path: str | Path | None = None) -> GameRun:
        """Play turns until the game ends or the loop halts."""
        events: list[GameEvent] = []
        if state.over:
            return GameRun(game_id=self.game_id, state=state, events=events, turns_played=0)

        self._append(
            events,
            EventType.GAME_START,
            state,
            {
                "resumed": bool(state.history),
                "phase": state.phase.value,
                "current_team": state.current_team.value,
                "initial_state_digest": state.state_digest(),
            },
        )

        turns_played = 0
        record: SerializedGame | None = None
        while not state.over:
            if turns_played >= self.config.max_turns:
                self._append(events, EventType.HALT, state, {"reason": HALT_MAX_TURNS, "max_turns": self.config.max_turns})
                logger.warning("Game %s halted after %d turns", self.game_id, turns_played)
                return self._finish(
                    state=state,
                    events=events,
                    turns_played=turns_played,
                    halted=True,
                    halt_reason=HALT_MAX_TURNS,
                    log_path=log_path,
                )

            turn_run = await self.play_turn(state)
            events.extend(turn_run.events)
            state = turn_run.state
            turns_played += 1
            if turn_run.record is not None:
                record = turn_run.record
            if turn_run.halted:
                return self._finish(
                    state=state,
                    events=events,
                    turns_played=turns_played,
                    halted=True,
                    halt_reason=turn_run.halt_reason,
                    failure=turn_run.failure,
                    log_path=log_path,
                )

        return self._finish(state=state, events=events, turns_played=turns_played, record=record, log_path=log_path)

    async def play_turn(self, state: GameState) -> TurnRun:
        """Drive the current turn to its end, the game's end, or a halt.

        Resumes mid-turn when `state` is already awaiting guesses.
        """
        events: list[GameEvent] = []
        if state.over:
            return TurnRun(state=state, events=events)

        if state.phase is Phase.AWAITING_CLUE:
            clue = await self.adapter.request_clue(state)
            if isinstance(clue, ProviderFailure):
                return self._halt_on_failure(state, events, clue)
            state = self.game.apply_clue(state, clue)
            self._publish(state)
            self._append(events, EventType.CLUE, state, {"clue": to_serializable(clue), "guesses_remaining": state.guesses_remaining})
            logger.info("%s clue: %s %d", clue.team.value, clue.word, clue.number)
            await self._pace()

        requests = 0
        while state.phase is Phase.AWAITING_GUESS:
            if requests >= self.config.max_guess_requests:
                self._append(
                    events,
                    EventType.HALT,
                    state,
                    {"reason": HALT_GUESS_REQUEST_CAP, "max_guess_requests": self.config.max_guess_requests},
                )
                logger.warning(
                    "Game %s halted: %d guess responses without the turn ending",
                    self.game_id,
                    requests,
                )
                return TurnRun(state=state, events=events, halted=True, halt_reason=HALT_GUESS_REQUEST_CAP)

            proposal = await self.adapter.request_guess(state)
            requests += 1
            if isinstance(proposal, ProviderFailure):
                return self._halt_on_failure(state, events, proposal)

            resolution = self.game.apply_guess(state, proposal)
            previous = state
            state = resolution.state
            self._append(
                events,
                EventType.GUESS,
                state,
                {
                    "proposal": to_serializable(proposal),
                    "outcome": resolution.outcome.value,
                    "index": resolution.index,
                    "card_type": resolution.card_type.value if resolution.card_type is not None else None,
                    "guesses_remaining": state.guesses_remaining,
                    "scores": state.scores(),
                },
            )
            if resolution.outcome.discarded:
                logger.debug("Discarded guess response %r (%s)", proposal.word, resolution.outcome.value)
                continue
            self._publish(state)

            if state.over and not previous.over:
                return TurnRun(state=state, events=events, record=self._game_over(state, events))
            await self._pace()

        if state.phase is Phase.TURN_END_PENDING:
            finished_team = state.current_team
            state = self.game.end_turn(state)
            self._publish(state)
            self._append(
                events,
                EventType.TURN_END,
                state,
                {"team": finished_team.value, "next_team": state.current_team.value, "scores": state.scores()},
            )
        return TurnRun(state=state, events=events)

    def _halt_on_failure(self, state: GameState, events: list[GameEvent], failure: ProviderFailure) -> TurnRun:
        self._append(events, EventType.PROVIDER_FAILURE, state, failure.to_dict())
        self._append(events, EventType.HALT, state, {"reason": HALT_PROVIDER_FAILURE, "phase": state.phase.value})
        logger.error("Game %s halted: %s", self.game_id, failure.message)
        return TurnRun(state=state, events=events, halted=True, halt_reason=HALT_PROVIDER_FAILURE, failure=failure)

    def _game_over(self, state: GameState, events: list[GameEvent]) -> SerializedGame | None:
        record: SerializedGame | None = None
        if self.recorder is not None:
            try:
                record = self.recorder.record(state)
            except Exception:
                logger.exception("Game %s: recorder failed; the game result stands", self.game_id)
        self._append(
            events,
            EventType.GAME_OVER,
            state,
            {
                "winner": state.winner.value if state.winner is not None else None,
                "reason": state.termination_reason,
                "scores": state.scores(),
                "final_state_digest": state.state_digest(),
                "recorded": record is not None,
            },
        )
        logger.info("Game %s over: %s wins (%s)", self.game_id, state.winner.value if state.winner else "-", state.termination_reason)
        return record

    def _finish(
        self,
        *,
        state: GameState,
        events: list[GameEvent],
        turns_played: int,
        halted: bool = False,
        halt_reason: str | None = None,
        failure: ProviderFailure | None = None,
        record: SerializedGame | None = None,
        log_path: str | Path | None = None,
    ) -> GameRun:
        resolved_log_path = self._resolve_log_path(log_path)
        if resolved_log_path is not None:
            write_jsonl(resolved_log_path, events)
        return GameRun(
            game_id=self.game_id,
            state=state,
            events=events,
            turns_played=turns_played,
            halted=halted,
            halt_reason=halt_reason,
            failure=failure,
            record=record,
            log_path=str(resolved_log_path) if resolved_log_path is not None else None,
        )

    def _resolve_log_path(self, log_path: str | Path | None) -> Path | None:
        if log_path is not None:
            return Path(log_path)
        if self.config.event_log_dir is None:
            return None
        return Path(self.config.event_log_dir) / f"{self.game_id}.jsonl"

    def _append(self, events: list[GameEvent], event_type: EventType, state: GameState, payload: dict[str, Any]) -> None:
        event = GameEvent.create(
            event_type=event_type,
            game_id=self.game_id,
            turn=len(state.history),
            payload={**payload, "state_digest": state.state_digest()},
        )
        events.append(event)
        if self.on_event is None:
            return
        try:
            self.on_event(event)
        except Exception:
            logger.exception("Game event callback failed; continuing")

    def _publish(self, state: GameState) -> None:
        if self.on_state is not None:
            self.on_state(state)

    async def _pace(self) -> None:
        if self.config.pacing_delay_sec > 0:
            await self._sleep(self.config.pacing_delay_sec)
