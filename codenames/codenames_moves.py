"""Transition events and provider response schemas for Codenames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

from engine.serialize import to_serializable

from .codenames_state import CardType, Clue, GameState, GuessProposal, Team


class EventKind(str, Enum):
    """Reducer event discriminators."""

    CLUE_GIVEN = "ClueGiven"
    GUESS_MADE = "GuessMade"
    TURN_ENDED = "TurnEnded"


@dataclass(frozen=True)
class ClueGiven:
    """A clue obtained for the current team."""

    clue: Clue
    kind: ClassVar[EventKind] = EventKind.CLUE_GIVEN

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "clue": to_serializable(self.clue)}


@dataclass(frozen=True)
class GuessMade:
    """A guesser response to adjudicate."""

    proposal: GuessProposal
    kind: ClassVar[EventKind] = EventKind.GUESS_MADE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "proposal": to_serializable(self.proposal)}


@dataclass(frozen=True)
class TurnEnded:
    """Hand the board to the other team."""

    kind: ClassVar[EventKind] = EventKind.TURN_ENDED

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value}


GameAction = ClueGiven | GuessMade | TurnEnded


class GuessOutcome(str, Enum):
    """How a guess response was adjudicated."""

    CORRECT = "correct"
    WRONG_TEAM = "wrong_team"
    NEUTRAL = "neutral"
    ASSASSIN = "assassin"
    WIN = "win"
    BUDGET_EXHAUSTED = "budget_exhausted"
    SKIPPED = "skipped"
    IGNORED_SKIP = "ignored_skip"
    UNRESOLVED = "unresolved"
    IGNORED_GAME_OVER = "ignored_game_over"

    @property
    def discarded(self) -> bool:
        """True when the response left the state untouched."""
        return self in (GuessOutcome.IGNORED_SKIP, GuessOutcome.UNRESOLVED, GuessOutcome.IGNORED_GAME_OVER)


@dataclass(frozen=True)
class GuessResolution:
    """Result of adjudicating one guess response."""

    state: GameState
    outcome: GuessOutcome
    index: int | None = None
    card_type: CardType | None = None

    @property
    def ends_turn(self) -> bool:
        return self.outcome in (
            GuessOutcome.WRONG_TEAM,
            GuessOutcome.NEUTRAL,
            GuessOutcome.BUDGET_EXHAUSTED,
            GuessOutcome.SKIPPED,
        )


class ClueResponse(BaseModel):
    """Strict clue giver output schema."""

    model_config = ConfigDict(extra="ignore")

    word: StrictStr
    number: StrictInt = Field(ge=0)
    reasoning: StrictStr | None = None

    @field_validator("word")
    @classmethod
    def _single_word(cls, value: str) -> str:
        word = value.strip()
        if not word:
            raise ValueError("Clue word must be non-empty.")
        if len(word.split()) != 1:
            raise ValueError("Clue must be a single word.")
        return word

    def to_clue(self, team: Team) -> Clue:
        return Clue(team=team, word=self.word, number=self.number, reasoning=self.reasoning)


class GuessResponse(BaseModel):
    """Strict guesser output schema: one word per response, or a skip."""

    model_config = ConfigDict(extra="ignore")

    words: StrictStr | None = None
    skip: StrictBool = False
    reasoning: StrictStr | None = None

    @field_validator("words")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    def to_proposal(self) -> GuessProposal:
        if not self.skip and self.words is None:
            raise ValueError("Guess response needs `words` unless `skip` is true.")
        return GuessProposal(word=self.words, skip=self.skip, reasoning=self.reasoning)
