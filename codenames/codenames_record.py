"""Persisted game record: projection from a finished state, sinks and loading."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from engine.errors import IllegalTransitionError

from .codenames_state import CardType, GameState, Team

logger = logging.getLogger(__name__)


class _RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class RecordedClue(_RecordModel):
    word: str
    number: int = Field(ge=0)
    reasoning: str | None = None


class RecordedGuess(_RecordModel):
    word: str
    was_correct: bool
    reasoning: str | None = None


class RecordedTurn(_RecordModel):
    team: Team
    clue: RecordedClue
    guesses: list[RecordedGuess] = Field(default_factory=list)
    # Older records kept one reasoning for the whole guess list.
    guesses_reasoning: str | None = None


class RecordedCard(_RecordModel):
    word: str
    type: CardType
    revealed: bool = False


class InitialOptions(_RecordModel):
    words: list[str]
    card_types: list[CardType]


class FinalScore(_RecordModel):
    red: int = 0
    blue: int = 0


class SerializedGame(_RecordModel):
    """A finished game as written to disk and fed to replay."""

    date: datetime
    initial_options: InitialOptions
    winner: Team | None = None
    final_score: FinalScore
    history: list[RecordedTurn] = Field(default_factory=list)
    cards: list[RecordedCard] = Field(default_factory=list)
    state_digest: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def to_record(state: GameState, *, now: datetime | None = None) -> SerializedGame:
    """Project a finished state into the persisted record format."""
    if not state.over:
        raise IllegalTransitionError(state.phase, "record", "only finished games can be recorded")
    return SerializedGame(
        date=now or datetime.now(timezone.utc),
        initial_options=InitialOptions(
            words=[card.word for card in state.cards],
            card_types=[card.type for card in state.cards],
        ),
        winner=state.winner,
        final_score=FinalScore(red=state.red_score, blue=state.blue_score),
        history=[
            RecordedTurn(
                team=turn.team,
                clue=RecordedClue(word=turn.clue.word, number=turn.clue.number, reasoning=turn.clue.reasoning),
                guesses=[
                    RecordedGuess(word=guess.word, was_correct=guess.was_correct, reasoning=guess.reasoning)
                    for guess in turn.guesses
                ],
            )
            for turn in state.history
        ],
        cards=[RecordedCard(word=card.word, type=card.type, revealed=card.revealed) for card in state.cards],
        state_digest=state.state_digest(),
    )


class RecordSink(Protocol):
    """Destination for finished game records."""

    def write(self, record: SerializedGame) -> str | None:
        """Persist `record`; return where it went, if anywhere."""


class JsonFileSink:
    """Writes one `codenames-<timestamp>.json` file per finished game."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, record: SerializedGame) -> Path:
        stamp = record.date.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        return self.directory / f"codenames-{stamp}.json"

    def write(self, record: SerializedGame) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(record)
        path.write_text(record.to_json() + "\n", encoding="utf-8")
        return str(path)


class GameRecorder:
    """Hands a finished state to an optional sink as a `SerializedGame`."""

    def __init__(self, sink: RecordSink | None = None):
        self.sink = sink
        self.last_location: str | None = None

    def record(self, state: GameState, *, now: datetime | None = None) -> SerializedGame:
        serialized = to_record(state, now=now)
        if self.sink is None:
            return serialized
        try:
            self.last_location = self.sink.write(serialized)
        except Exception:
            # The record is still returned; only the saved copy is missing.
            self.last_location = None
            logger.exception("Could not save game record to %s", type(self.sink).__name__)
        else:
            logger.info("Saved game record to %s", self.last_location)
        return serialized


def load_record(source: str | Path | Mapping[str, Any]) -> SerializedGame:
    """Parse and validate a record from a path, a JSON string or a mapping."""
    if isinstance(source, Mapping):
        return SerializedGame.model_validate(dict(source))
    if isinstance(source, Path):
        return SerializedGame.model_validate_json(source.read_text(encoding="utf-8"))
    text = source.strip()
    if text.startswith("{"):
        return SerializedGame.model_validate_json(text)
    return SerializedGame.model_validate_json(Path(source).read_text(encoding="utf-8"))

