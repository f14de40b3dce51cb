"""Scripted adapter for tests and deterministic demos."""

from __future__ import annotations

import inspect
from collections import deque
from typing import Any, Callable, Iterable

from codenames.codenames_state import Clue, GameState, GuessProposal

from .adapter import ProviderFailure

ClueItem = Clue | tuple[str, int] | ProviderFailure
GuessItem = GuessProposal | str | ProviderFailure


class ScriptedAdapter:
    """Answers from queued responses, then from optional policies.

    Clues may be given as `(word, number)` and are issued for the team whose
    turn it is. Guesses may be given as plain words.
    """

    def __init__(
        self,
        clues: Iterable[ClueItem] = (),
        guesses: Iterable[GuessItem] = (),
        *,
        clue_policy: Callable[[GameState], Any] | None = None,
        guess_policy: Callable[[GameState], Any] | None = None,
    ):
        self._clues: deque[ClueItem] = deque(clues)
        self._guesses: deque[GuessItem] = deque(guesses)
        self.clue_policy = clue_policy
        self.guess_policy = guess_policy
        self.clue_requests = 0
        self.guess_requests = 0

    def queue_clue(self, item: ClueItem) -> None:
        self._clues.append(item)

    def queue_guess(self, item: GuessItem) -> None:
        self._guesses.append(item)

    async def request_clue(self, state: GameState) -> Clue | ProviderFailure:
        self.clue_requests += 1
        item = await self._next(self._clues, self.clue_policy, state, "clue")
        if isinstance(item, tuple):
            word, number = item
            return Clue(team=state.current_team, word=word, number=number)
        return item

    async def request_guess(self, state: GameState) -> GuessProposal | ProviderFailure:
        self.guess_requests += 1
        item = await self._next(self._guesses, self.guess_policy, state, "guess")
        if isinstance(item, str):
            return GuessProposal(word=item)
        return item

    async def _next(self, queue: deque, policy: Callable[[GameState], Any] | None, state: GameState, kind: str) -> Any:
        if queue:
            return queue.popleft()
        if policy is None:
            raise LookupError(f"ScriptedAdapter has no {kind} left to give.")
        result = policy(state)
        if inspect.isawaitable(result):
            result = await result
        return result
