"""Random baseline adapter that needs no model provider."""

from __future__ import annotations

import hashlib
import random

from codenames.codenames_observation import clue_giver_view, guesser_view
from codenames.codenames_state import Clue, GameState, GuessProposal

_CLUE_WORDS = (
    "THING", "IDEA", "PLACE", "NATURE", "MOTION", "SOUND", "COLOR", "SHAPE",
    "WORK", "TRAVEL", "HISTORY", "SCIENCE", "FOOD", "SPORT", "MUSIC", "POWER",
)


class RandomAdapter:
    """Gives arbitrary one-word clues and guesses uniformly among unrevealed cards.

    Useful for exercising the loop offline; it never skips.
    """

    def __init__(self, seed: int | str | None = None, *, clue_number: int = 1):
        self.clue_number = clue_number
        self._rng = random.Random()
        self.reseed(seed)

    def reseed(self, seed: int | str | None) -> None:
        if seed is None:
            self._rng.seed()
            return
        material = f"random-adapter:{seed}".encode("utf-8")
        self._rng.seed(int.from_bytes(hashlib.sha256(material).digest()[:8], byteorder="big", signed=False))

    async def request_clue(self, state: GameState) -> Clue:
        view = clue_giver_view(state)
        board = [word.lower() for word in view.board_words]
        options = [word for word in _CLUE_WORDS if not any(card in word.lower() for card in board)]
        word = self._rng.choice(options or ["PASS"])
        return Clue(team=view.team, word=word, number=self.clue_number)

    async def request_guess(self, state: GameState) -> GuessProposal:
        view = guesser_view(state)
        return GuessProposal(word=self._rng.choice(view.available_words))
