"""Pydantic request schemas for the game API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codenames.codenames_state import Team

ProviderSpec = str | dict[str, Any]


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoleRequest(_ApiModel):
    """Request body for a single clue or guess, given a serialized state."""

    team: Team
    state: dict[str, Any]
    provider: ProviderSpec | None = None


class CreateGameRequest(_ApiModel):
    """Request body for creating a new game session.

    `words` and `card_types` describe a custom board; omit both for a random deal.
    `providers` maps team names to provider configs and overrides `provider`.
    """

    words: list[str] | None = None
    card_types: list[str] | None = None
    seed: int | None = None
    provider: ProviderSpec | None = None
    providers: dict[str, ProviderSpec] | None = None
    pacing_delay_sec: float = Field(default=0.0, ge=0.0)


class ReplayRequest(_ApiModel):
    """Request body for replaying a recorded game."""

    record: dict[str, Any]
