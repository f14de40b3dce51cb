"""State, value types and enums for Codenames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from engine.state import State


class Team(str, Enum):
    """Codenames teams. Red always has nine words and opens the game."""

    RED = "red"
    BLUE = "blue"


class Role(str, Enum):
    """Model-played roles within a team."""

    CLUE_GIVER = "CLUE_GIVER"
    GUESSER = "GUESSER"


class Phase(str, Enum):
    """Turn state machine phases."""

    AWAITING_CLUE = "AWAITING_CLUE"
    AWAITING_GUESS = "AWAITING_GUESS"
    TURN_END_PENDING = "TURN_END_PENDING"
    GAME_OVER = "GAME_OVER"


class CardType(str, Enum):
    """Hidden affiliation of each board card."""

    RED = "red"
    BLUE = "blue"
    NEUTRAL = "neutral"
    ASSASSIN = "assassin"


BOARD_SIZE = 25
STANDARD_COMPOSITION: dict[CardType, int] = {
    CardType.RED: 9,
    CardType.BLUE: 8,
    CardType.NEUTRAL: 7,
    CardType.ASSASSIN: 1,
}
WIN_THRESHOLDS: dict[Team, int] = {
    Team.RED: STANDARD_COMPOSITION[CardType.RED],
    Team.BLUE: STANDARD_COMPOSITION[CardType.BLUE],
}
STARTING_TEAM = Team.RED

# Clue numbers with special meaning. Both grant an unlimited budget.
CLUE_NUMBER_NONE = 0
CLUE_NUMBER_ALL = 100
UNLIMITED_GUESS_CAP = 100

SKIP_WORD = "SKIP"


def other_team(team: Team) -> Team:
    return Team.BLUE if team is Team.RED else Team.RED


def card_type_for(team: Team) -> CardType:
    return CardType.RED if team is Team.RED else CardType.BLUE


def team_for_card(card_type: CardType) -> Team | None:
    """Return the team owning a card type, or None for neutral/assassin."""
    if card_type is CardType.RED:
        return Team.RED
    if card_type is CardType.BLUE:
        return Team.BLUE
    return None


@dataclass(frozen=True)
class Card:
    """One board cell. Only `revealed` ever changes, and only false -> true."""

    word: str
    type: CardType
    revealed: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Card":
        return cls(word=str(data["word"]), type=CardType(str(data["type"]).lower()), revealed=bool(data.get("revealed", False)))


@dataclass(frozen=True)
class Clue:
    """Clue giver output accepted for a turn."""

    team: Team
    word: str
    number: int
    reasoning: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, team: Team | None = None) -> "Clue":
        raw_team = data.get("team", team)
        if raw_team is None:
            raise ValueError("Clue payload is missing its team.")
        return cls(
            team=Team(str(getattr(raw_team, "value", raw_team)).lower()),
            word=str(data["word"]),
            number=int(data["number"]),
            reasoning=data.get("reasoning"),
        )


@dataclass(frozen=True)
class Guess:
    """An adjudicated guess as it appears in turn history."""

    word: str
    was_correct: bool
    reasoning: str | None = None

    @property
    def is_skip(self) -> bool:
        return self.word == SKIP_WORD

    @classmethod
    def skip(cls, reasoning: str | None = None) -> "Guess":
        return cls(word=SKIP_WORD, was_correct=False, reasoning=reasoning)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Guess":
        was_correct = data.get("was_correct", data.get("wasCorrect", False))
        return cls(word=str(data["word"]), was_correct=bool(was_correct), reasoning=data.get("reasoning"))


@dataclass(frozen=True)
class GuessProposal:
    """Guesser output before adjudication: one word, or a request to stop."""

    word: str | None
    skip: bool = False
    reasoning: str | None = None


@dataclass(frozen=True)
class Turn:
    """One team's clue and the guesses made under it."""

    team: Team
    clue: Clue
    guesses: tuple[Guess, ...] = ()

    @property
    def counted_guesses(self) -> tuple[Guess, ...]:
        return tuple(guess for guess in self.guesses if not guess.is_skip)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Turn":
        team = Team(str(data["team"]).lower())
        return cls(
            team=team,
            clue=Clue.from_dict(data["clue"], team=team),
            guesses=tuple(Guess.from_dict(guess) for guess in data.get("guesses", ())),
        )


@dataclass(frozen=True)
class GameState(State):
    """Immutable Codenames game aggregate. Every transition returns a new instance."""

    cards: tuple[Card, ...]
    current_team: Team = STARTING_TEAM
    red_score: int = 0
    blue_score: int = 0
    phase: Phase = Phase.AWAITING_CLUE
    winner: Team | None = None
    active_clue: Clue | None = None
    guesses_remaining: int = 0
    history: tuple[Turn, ...] = ()
    termination_reason: str | None = None

    @property
    def over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def current_turn(self) -> Turn | None:
        """The turn opened by the active clue, if any."""
        if self.active_clue is None or not self.history:
            return None
        return self.history[-1]

    def score(self, team: Team) -> int:
        return self.red_score if team is Team.RED else self.blue_score

    def scores(self) -> dict[str, int]:
        return {Team.RED.value: self.red_score, Team.BLUE.value: self.blue_score}

    def unrevealed_words(self, card_type: CardType | None = None) -> list[str]:
        """Unrevealed board words, optionally filtered by affiliation."""
        return [
            card.word
            for card in self.cards
            if not card.revealed and (card_type is None or card.type is card_type)
        ]

    def team_words_remaining(self, team: Team) -> int:
        return len(self.unrevealed_words(card_type_for(team)))

    def revealed_counts(self) -> dict[str, int]:
        """Return number of revealed cards for each assignment type."""
        counts = {card_type.value: 0 for card_type in CardType}
        for card in self.cards:
            if card.revealed:
                counts[card.type.value] += 1
        return counts

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameState":
        """Rebuild a state from `to_dict()` output."""
        active_clue = data.get("active_clue")
        winner = data.get("winner")
        return cls(
            cards=tuple(Card.from_dict(card) for card in data["cards"]),
            current_team=Team(str(data.get("current_team", STARTING_TEAM.value)).lower()),
            red_score=int(data.get("red_score", 0)),
            blue_score=int(data.get("blue_score", 0)),
            phase=Phase(str(data.get("phase", Phase.AWAITING_CLUE.value))),
            winner=Team(str(winner).lower()) if winner is not None else None,
            active_clue=Clue.from_dict(active_clue) if active_clue is not None else None,
            guesses_remaining=int(data.get("guesses_remaining", 0)),
            history=tuple(Turn.from_dict(turn) for turn in data.get("history", ())),
            termination_reason=data.get("termination_reason"),
        )
