"""In-memory game sessions: one orchestration task per game, cancellable."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence
from uuid import uuid4

from codenames.codenames_game import CodenamesGame
from codenames.codenames_record import GameRecorder, JsonFileSink, SerializedGame
from codenames.codenames_state import GameState
from engine.events import GameEvent
from engine.orchestrator import GameRun, OrchestratorConfig, TurnOrchestrator
from engine.providers.env_utils import GameSettings
from engine.serialize import to_serializable
from server.provider_factory import create_game_adapter, normalize_provider_config, provider_label

logger = logging.getLogger(__name__)


def board_view(state: GameState, *, show_key: bool = False) -> list[dict[str, Any]]:
    """Cards as seen by a guesser, or by a clue giver with `show_key`."""
    return [
        {
            "word": card.word,
            "revealed": card.revealed,
            "type": card.type.value if card.revealed or show_key else None,
        }
        for card in state.cards
    ]


@dataclass
class GameSession:
    """Server-side state for one game and its orchestration task."""

    game_id: str
    state: GameState
    orchestrator: TurnOrchestrator
    provider: str
    events: list[GameEvent] = field(default_factory=list)
    record: SerializedGame | None = None
    last_run: GameRun | None = None
    cancelled: bool = False
    task: asyncio.Task | None = field(default=None, repr=False)
    _cancel_requested: bool = field(default=False, repr=False)

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def _on_state(self, state: GameState) -> None:
        self.state = state

    def _on_event(self, event: GameEvent) -> None:
        self.events.append(event)

    async def run(self) -> dict[str, Any]:
        """Run or resume the loop until game over, halt or cancellation."""
        if self.running:
            raise RuntimeError(f"Game {self.game_id} is already running.")
        if self.state.over:
            return self.view()

        self._cancel_requested = False
        self.cancelled = False
        self.last_run = None
        task = asyncio.create_task(self.orchestrator.run_game(self.state))
        self.task = task
        try:
            run = await task
        except asyncio.CancelledError:
            if not self._cancel_requested:
                # The caller went away; do not leave the run behind.
                task.cancel()
                raise
            self.cancelled = True
            logger.info("Game %s cancelled in phase %s", self.game_id, self.state.phase.value)
            return self.view()

        self.last_run = run
        self.state = run.state
        if run.record is not None:
            self.record = run.record
        return self.view()

    def cancel(self) -> bool:
        """Cancel the in-flight run. Returns False when nothing was running."""
        task = self.task
        if task is None or task.done():
            return False
        self._cancel_requested = True
        task.cancel()
        return True

    def view(self, *, show_key: bool = False) -> dict[str, Any]:
        state = self.state
        run = self.last_run
        active_clue = state.active_clue
        return {
            "game_id": self.game_id,
            "provider": self.provider,
            "phase": state.phase.value,
            "current_team": state.current_team.value,
            "scores": state.scores(),
            "winner": state.winner.value if state.winner is not None else None,
            "over": state.over,
            "termination_reason": state.termination_reason,
            "active_clue": to_serializable(active_clue) if active_clue is not None else None,
            "guesses_remaining": state.guesses_remaining,
            "cards": board_view(state, show_key=show_key),
            "history": to_serializable(state.history),
            "running": self.running,
            "cancelled": self.cancelled,
            "halted": bool(run and run.halted and not state.over),
            "halt_reason": run.halt_reason if run is not None else None,
            "failure": run.failure.to_dict() if run is not None and run.failure is not None else None,
            "event_count": len(self.events),
            "has_record": self.record is not None,
        }


class GameSessionStore:
    """Simple in-memory session storage."""

    def __init__(self, *, settings: GameSettings | None = None, record_dir: str | Path | None = None) -> None:
        self.settings = settings or GameSettings.from_env()
        resolved_dir = record_dir if record_dir is not None else self.settings.record_dir
        self.record_dir = Path(resolved_dir) if resolved_dir else None
        self._sessions: dict[str, GameSession] = {}

    def create_game(
        self,
        *,
        words: Sequence[str] | None = None,
        card_types: Sequence[str] | None = None,
        seed: int | None = None,
        provider: Any = None,
        providers: Mapping[str, Any] | None = None,
        pacing_delay_sec: float = 0.0,
    ) -> GameSession:
        """Create a session. Board setup errors propagate and no session is stored."""
        game = CodenamesGame()
        state = game.new_game(words, card_types, seed=seed)
        adapter = create_game_adapter(provider, providers, settings=self.settings)
        label = (
            ",".join(
                f"{team}={provider_label(normalize_provider_config(raw, settings=self.settings))}"
                for team, raw in sorted(providers.items())
            )
            if providers
            else provider_label(normalize_provider_config(provider, settings=self.settings))
        )

        game_id = uuid4().hex[:12]
        sink = JsonFileSink(self.record_dir) if self.record_dir is not None else None
        orchestrator = TurnOrchestrator(
            game,
            adapter,
            recorder=GameRecorder(sink),
            config=OrchestratorConfig(pacing_delay_sec=pacing_delay_sec),
            game_id=game_id,
        )
        session = GameSession(game_id=game_id, state=state, orchestrator=orchestrator, provider=label)
        orchestrator.on_event = session._on_event
        orchestrator.on_state = session._on_state
        self._sessions[game_id] = session
        logger.info("Created game %s with provider %s", game_id, label)
        return session

    def get(self, game_id: str) -> GameSession:
        session = self._sessions.get(game_id)
        if session is None:
            raise KeyError(game_id)
        return session

    def cancel_all(self) -> int:
        """Cancel every running session; used on shutdown."""
        return sum(1 for session in self._sessions.values() if session.cancel())
