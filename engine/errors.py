"""Structured exceptions used across the Codenames engine."""

from __future__ import annotations

from typing import Any


class CodenamesError(Exception):
    """Base class for engine-level exceptions."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class BoardSetupError(CodenamesError, ValueError):
    """Raised when a board cannot be created. The game is never started."""


class InvalidWordCount(BoardSetupError):
    """Raised when a board is not built from exactly 25 distinct words."""

    def __init__(self, message: str, *, received: int | None = None):
        self.received = received
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.received is not None:
            payload["received"] = self.received
        return payload


class InvalidBoardComposition(BoardSetupError):
    """Raised when supplied affiliations do not match the standard 9/8/7/1 split."""

    def __init__(self, message: str, *, counts: dict[str, int] | None = None):
        self.counts = dict(counts or {})
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.counts:
            payload["counts"] = dict(self.counts)
        return payload


class IllegalTransitionError(CodenamesError, ValueError):
    """Raised when a state transition is requested in the wrong phase."""

    def __init__(self, phase: Any, transition: str, reason: str | None = None):
        self.phase = phase
        self.transition = transition
        self.reason = reason
        phase_value = getattr(phase, "value", phase)
        message = f"Cannot apply {transition} in phase {phase_value}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ProviderError(CodenamesError):
    """Base class for a single failed model-provider attempt."""


class ProviderTransportFailure(ProviderError):
    """Raised when the provider call itself fails (network, HTTP status, client error)."""


class ProviderSchemaViolation(ProviderError):
    """Raised when the provider answered but the output fails the role's schema."""

    def __init__(self, message: str, *, raw_response: str | None = None):
        self.raw_response = raw_response
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.raw_response is not None:
            payload["raw_response"] = self.raw_response
        return payload


class ReplayDivergence(UserWarning):
    """Issued when a replayed game does not match what its record claims."""
