"""Engine exports shared by the game rules and the orchestrator.

The orchestrator and providers import the game package, so they are not
re-exported here; import `engine.orchestrator` and `engine.providers` directly.
"""

from .errors import (
    BoardSetupError,
    CodenamesError,
    IllegalTransitionError,
    InvalidBoardComposition,
    InvalidWordCount,
    ProviderError,
    ProviderSchemaViolation,
    ProviderTransportFailure,
    ReplayDivergence,
)
from .events import EventType, GameEvent, ProviderCallEvent, ProviderCallStatus
from .retry import RetryPolicy
from .state import State

__all__ = [
    "BoardSetupError",
    "CodenamesError",
    "EventType",
    "GameEvent",
    "IllegalTransitionError",
    "InvalidBoardComposition",
    "InvalidWordCount",
    "ProviderCallEvent",
    "ProviderCallStatus",
    "ProviderError",
    "ProviderSchemaViolation",
    "ProviderTransportFailure",
    "ReplayDivergence",
    "RetryPolicy",
    "State",
]
