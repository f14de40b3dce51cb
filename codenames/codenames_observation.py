"""Role-specific views of the game handed to model providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from engine.errors import IllegalTransitionError
from engine.serialize import digest, to_serializable

from .codenames_state import CardType, Clue, GameState, Phase, Team, Turn, card_type_for, other_team


@dataclass(frozen=True)
class ClueGiverView:
    """Everything the clue giver may see: the full key for unrevealed cards."""

    team: Team
    own_words: tuple[str, ...]
    opponent_words: tuple[str, ...]
    neutral_words: tuple[str, ...]
    assassin_words: tuple[str, ...]
    history: tuple[Turn, ...]
    revealed_words: tuple[str, ...] = ()

    @property
    def board_words(self) -> tuple[str, ...]:
        """Every word on the board, revealed or not. Clues may not use any of them."""
        return self.own_words + self.opponent_words + self.neutral_words + self.assassin_words + self.revealed_words

    def to_dict(self) -> dict[str, Any]:
        return to_serializable(self)

    def observation_digest(self) -> str:
        return digest(self.to_dict())


@dataclass(frozen=True)
class GuesserView:
    """What the guesser may see: words only, no affiliations."""

    team: Team
    clue: Clue
    available_words: tuple[str, ...]
    guesses_this_turn: tuple[str, ...]
    guesses_remaining: int
    history: tuple[Turn, ...]

    def to_dict(self) -> dict[str, Any]:
        return to_serializable(self)

    def observation_digest(self) -> str:
        return digest(self.to_dict())


def clue_giver_view(state: GameState) -> ClueGiverView:
    """Build the clue giver context for the current team."""
    if state.phase is not Phase.AWAITING_CLUE:
        raise IllegalTransitionError(state.phase, "clue request")
    team = state.current_team
    return ClueGiverView(
        team=team,
        own_words=tuple(state.unrevealed_words(card_type_for(team))),
        opponent_words=tuple(state.unrevealed_words(card_type_for(other_team(team)))),
        neutral_words=tuple(state.unrevealed_words(CardType.NEUTRAL)),
        assassin_words=tuple(state.unrevealed_words(CardType.ASSASSIN)),
        history=state.history,
        revealed_words=tuple(card.word for card in state.cards if card.revealed),
    )


def guesser_view(state: GameState) -> GuesserView:
    """Build the guesser context for the open turn."""
    turn = state.current_turn
    if state.phase is not Phase.AWAITING_GUESS or turn is None or state.active_clue is None:
        raise IllegalTransitionError(state.phase, "guess request")
    return GuesserView(
        team=state.current_team,
        clue=state.active_clue,
        available_words=tuple(state.unrevealed_words()),
        guesses_this_turn=tuple(guess.word for guess in turn.counted_guesses),
        guesses_remaining=state.guesses_remaining,
        history=state.history[:-1],
    )
