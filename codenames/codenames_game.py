"""Codenames turn rules as pure `(state, event) -> state` transitions."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import replace
from typing import Any, Sequence

from engine.errors import IllegalTransitionError

from .codenames_board import create_board, deal_words, find_unrevealed_index, reveal
from .codenames_moves import ClueGiven, GameAction, GuessMade, GuessOutcome, GuessResolution, TurnEnded
from .codenames_state import (
    CLUE_NUMBER_ALL,
    CLUE_NUMBER_NONE,
    STARTING_TEAM,
    UNLIMITED_GUESS_CAP,
    WIN_THRESHOLDS,
    CardType,
    Clue,
    GameState,
    Guess,
    GuessProposal,
    Phase,
    Team,
    Turn,
    card_type_for,
    other_team,
    team_for_card,
)
from .codenames_words import DEFAULT_WORDS

logger = logging.getLogger(__name__)


def guess_budget(number: int) -> int:
    """Counted guesses allowed for a clue number.

    A literal n allows n + 1 guesses (one bonus). The sentinels 0 ("none
    relate") and 100 ("all remaining relate") are unlimited, capped at
    `UNLIMITED_GUESS_CAP` so a turn always terminates.
    """
    if number < 0:
        raise ValueError("Clue number must be >= 0.")
    if number in (CLUE_NUMBER_NONE, CLUE_NUMBER_ALL) or number >= UNLIMITED_GUESS_CAP:
        return UNLIMITED_GUESS_CAP
    return min(number + 1, UNLIMITED_GUESS_CAP)


class CodenamesGame:
    """Two-team Codenames rules: clue, guess loop, turn switch, win detection."""

    game_name = "codenames"

    def new_game(
        self,
        words: Sequence[str] | None = None,
        card_types: Sequence[Any] | None = None,
        *,
        seed: int | None = None,
        word_list: Sequence[str] = DEFAULT_WORDS,
    ) -> GameState:
        """Create the initial state from a custom layout or a fresh shuffle.

        Raises `InvalidWordCount` / `InvalidBoardComposition`; no game exists
        when setup fails.
        """
        rng = random.Random(seed)
        board_words = tuple(words) if words is not None else deal_words(word_list, rng)
        cards = create_board(board_words, card_types, rng=rng)
        return GameState(cards=cards, current_team=STARTING_TEAM, phase=Phase.AWAITING_CLUE)

    def apply(self, state: GameState, action: GameAction) -> GameState:
        """Reducer entry point shared by live play and replay."""
        if isinstance(action, ClueGiven):
            return self.apply_clue(state, action.clue)
        if isinstance(action, GuessMade):
            return self.apply_guess(state, action.proposal).state
        if isinstance(action, TurnEnded):
            return self.end_turn(state)
        raise ValueError(f"Unsupported action type: {type(action)!r}")

    def apply_clue(self, state: GameState, clue: Clue) -> GameState:
        """Open a turn for the current team under `clue`."""
        if state.over:
            return state
        if state.phase is not Phase.AWAITING_CLUE:
            raise IllegalTransitionError(state.phase, "clue")
        if clue.team is not state.current_team:
            raise IllegalTransitionError(
                state.phase, "clue", f"clue is for {clue.team.value}, but it is {state.current_team.value}'s turn"
            )
        return replace(
            state,
            phase=Phase.AWAITING_GUESS,
            active_clue=clue,
            guesses_remaining=guess_budget(clue.number),
            history=state.history + (Turn(team=clue.team, clue=clue),),
        )

    def can_skip(self, state: GameState) -> bool:
        """A skip is legal only once the turn has at least one counted guess."""
        turn = state.current_turn
        return state.phase is Phase.AWAITING_GUESS and turn is not None and bool(turn.counted_guesses)

    def apply_guess(self, state: GameState, proposal: GuessProposal) -> GuessResolution:
        """Adjudicate one guesser response.

        Illegal skips and words that match no unrevealed card are discarded
        without touching the state or the budget.
        """
        if state.over:
            return GuessResolution(state=state, outcome=GuessOutcome.IGNORED_GAME_OVER)
        if state.phase is not Phase.AWAITING_GUESS:
            raise IllegalTransitionError(state.phase, "guess")

        team = state.current_team
        if proposal.skip:
            if self.can_skip(state):
                next_state = replace(
                    self._append_guess(state, Guess.skip(proposal.reasoning)),
                    phase=Phase.TURN_END_PENDING,
                )
                return GuessResolution(state=next_state, outcome=GuessOutcome.SKIPPED)
            if proposal.word is None:
                return GuessResolution(state=state, outcome=GuessOutcome.IGNORED_SKIP)
            logger.debug("Ignoring illegal skip flag; adjudicating %r instead", proposal.word)

        index = find_unrevealed_index(state.cards, proposal.word)
        if index is None:
            return GuessResolution(state=state, outcome=GuessOutcome.UNRESOLVED)

        cards, card_type = reveal(state.cards, index)
        if card_type is None:
            return GuessResolution(state=state, outcome=GuessOutcome.UNRESOLVED)

        was_correct = card_type is card_type_for(team)
        owner = team_for_card(card_type)
        guess = Guess(word=cards[index].word, was_correct=was_correct, reasoning=proposal.reasoning)
        next_state = replace(
            self._append_guess(state, guess),
            cards=cards,
            red_score=state.red_score + (1 if owner is Team.RED else 0),
            blue_score=state.blue_score + (1 if owner is Team.BLUE else 0),
            guesses_remaining=max(state.guesses_remaining - 1, 0),
        )

        # Assassin must be checked before score thresholds.
        if card_type is CardType.ASSASSIN:
            return GuessResolution(
                state=self._finish(next_state, winner=other_team(team), reason="assassin"),
                outcome=GuessOutcome.ASSASSIN,
                index=index,
                card_type=card_type,
            )

        winner = self._threshold_winner(next_state)
        if winner is not None:
            return GuessResolution(
                state=self._finish(next_state, winner=winner, reason="all_words_revealed"),
                outcome=GuessOutcome.WIN,
                index=index,
                card_type=card_type,
            )

        if not was_correct:
            outcome = GuessOutcome.NEUTRAL if card_type is CardType.NEUTRAL else GuessOutcome.WRONG_TEAM
            return GuessResolution(
                state=replace(next_state, phase=Phase.TURN_END_PENDING),
                outcome=outcome,
                index=index,
                card_type=card_type,
            )

        if next_state.guesses_remaining <= 0:
            return GuessResolution(
                state=replace(next_state, phase=Phase.TURN_END_PENDING),
                outcome=GuessOutcome.BUDGET_EXHAUSTED,
                index=index,
                card_type=card_type,
            )

        return GuessResolution(state=next_state, outcome=GuessOutcome.CORRECT, index=index, card_type=card_type)

    def end_turn(self, state: GameState) -> GameState:
        """Switch teams after a finished turn."""
        if state.over:
            return state
        if state.phase is not Phase.TURN_END_PENDING:
            raise IllegalTransitionError(state.phase, "turn end")
        return replace(
            state,
            current_team=other_team(state.current_team),
            phase=Phase.AWAITING_CLUE,
            active_clue=None,
            guesses_remaining=0,
        )

    def render(self, state: GameState, *, show_key: bool = False) -> str:
        """Render the board as text for the CLI and debugging."""
        size = len(state.cards)
        cols = int(math.sqrt(size))
        if cols * cols != size:
            cols = min(5, size)
        tokens: list[str] = []
        for index, card in enumerate(state.cards):
            if card.revealed:
                token = f"[{card.word}:{card.type.value.upper()}]"
            elif show_key:
                token = f"{card.word}:{card.type.value}"
            else:
                token = card.word
            tokens.append(f"{index:02d}:{token}")

        rows = [" | ".join(tokens[row : row + cols]) for row in range(0, len(tokens), cols)]
        clue = state.active_clue
        clue_text = f"{clue.word} {clue.number}" if clue is not None else "-"
        header = (
            f"team={state.current_team.value} phase={state.phase.value} clue={clue_text} "
            f"guesses_remaining={state.guesses_remaining} "
            f"score=red {state.red_score}/{WIN_THRESHOLDS[Team.RED]} blue {state.blue_score}/{WIN_THRESHOLDS[Team.BLUE]}"
        )
        if state.winner is not None:
            header += f" winner={state.winner.value}"
        return header + "\n" + "\n".join(rows)

    def _append_guess(self, state: GameState, guess: Guess) -> GameState:
        turn = state.history[-1]
        updated = replace(turn, guesses=turn.guesses + (guess,))
        return replace(state, history=state.history[:-1] + (updated,))

    def _finish(self, state: GameState, *, winner: Team, reason: str) -> GameState:
        return replace(
            state,
            phase=Phase.GAME_OVER,
            winner=winner,
            termination_reason=reason,
            active_clue=None,
            guesses_remaining=0,
        )

    def _threshold_winner(self, state: GameState) -> Team | None:
        if state.red_score >= WIN_THRESHOLDS[Team.RED]:
            return Team.RED
        if state.blue_score >= WIN_THRESHOLDS[Team.BLUE]:
            return Team.BLUE
        return None
