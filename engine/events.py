"""Event schema and JSONL logging utilities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from time import time
from typing import Any, Iterable, Mapping

from .serialize import json_dumps, to_serializable


class EventType(str, Enum):
    """Event types emitted by the turn orchestrator."""

    GAME_START = "game_start"
    CLUE = "clue"
    GUESS = "guess"
    TURN_END = "turn_end"
    PROVIDER_FAILURE = "provider_failure"
    HALT = "halt"
    GAME_OVER = "game_over"


class ProviderCallStatus(str, Enum):
    """Lifecycle of one provider attempt."""

    ATTEMPTED = "attempted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _now_ms() -> int:
    return int(time() * 1000)


@dataclass(frozen=True)
class GameEvent:
    """Single orchestration event, in the order it happened."""

    event_type: EventType
    game_id: str
    turn: int
    timestamp_ms: int
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Return JSON-serializable event data."""
        return {
            "event_type": self.event_type.value,
            "game_id": self.game_id,
            "turn": self.turn,
            "timestamp_ms": self.timestamp_ms,
            "payload": to_serializable(self.payload),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameEvent":
        """Build an event from a dictionary payload."""
        return cls(
            event_type=EventType(str(data["event_type"])),
            game_id=str(data["game_id"]),
            turn=int(data["turn"]),
            timestamp_ms=int(data["timestamp_ms"]),
            payload=dict(data.get("payload", {})),
        )

    @classmethod
    def create(cls, event_type: EventType, game_id: str, turn: int, payload: dict[str, Any]) -> "GameEvent":
        """Construct an event with the current wall-clock timestamp."""
        return cls(
            event_type=event_type,
            game_id=game_id,
            turn=turn,
            timestamp_ms=_now_ms(),
            payload=payload,
        )


@dataclass(frozen=True)
class ProviderCallEvent:
    """Observability record for one provider attempt. Never drives control flow."""

    role: str
    status: ProviderCallStatus
    attempt: int
    max_attempts: int
    timestamp_ms: int
    duration_ms: float | None = None
    error: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "status": self.status.value,
            "attempt": self.attempt,
            "max_attempts": self.max_attempts,
            "timestamp_ms": self.timestamp_ms,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }

    @classmethod
    def create(
        cls,
        role: str,
        status: ProviderCallStatus,
        attempt: int,
        max_attempts: int,
        *,
        duration_ms: float | None = None,
        error: dict[str, Any] | None = None,
    ) -> "ProviderCallEvent":
        return cls(
            role=role,
            status=status,
            attempt=attempt,
            max_attempts=max_attempts,
            timestamp_ms=_now_ms(),
            duration_ms=duration_ms,
            error=error,
        )


def write_jsonl(path: str | Path, events: Iterable[GameEvent | ProviderCallEvent]) -> None:
    """Persist events as JSONL to disk."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        for event in events:
            handle.write(json_dumps(event.to_dict()))
            handle.write("\n")
