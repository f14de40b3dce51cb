"""State conventions for immutable, serializable game states."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .serialize import digest, to_serializable


@dataclass(frozen=True)
class State:
    """Base immutable state object. Transitions return new instances."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return to_serializable(self)

    def state_digest(self) -> str:
        """Return a deterministic digest, stable across runs and replays."""
        return digest(self.to_dict())
