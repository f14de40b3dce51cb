"""Model provider adapter: role prompts in, validated clues/guesses out, with retry."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Awaitable, Callable, Mapping, Protocol

from pydantic import ValidationError

from codenames.codenames_moves import ClueResponse, GuessResponse
from codenames.codenames_observation import ClueGiverView, clue_giver_view, guesser_view
from codenames.codenames_prompts import build_clue_prompt, build_guess_prompt, build_repair_prompt, system_prompt_for
from codenames.codenames_state import Clue, GameState, GuessProposal, Role, Team

from ..errors import ProviderError, ProviderSchemaViolation, ProviderTransportFailure
from ..events import ProviderCallEvent, ProviderCallStatus
from ..retry import RetryPolicy

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class LLMClient(Protocol):
    """Minimal protocol for LLM API clients."""

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        """Return a model response for a prompt."""


@dataclass(frozen=True)
class ProviderFailure:
    """Terminal result of a provider request once every attempt has failed."""

    role: Role
    attempts: int
    cause: ProviderError

    @property
    def message(self) -> str:
        return f"Could not get a response from the {self.role.value} model after {self.attempts} attempt(s): {self.cause}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "role": self.role.value,
            "attempts": self.attempts,
            "cause": self.cause.to_dict(),
        }


class ProviderAdapter(Protocol):
    """What the orchestrator needs from a clue/guess source."""

    async def request_clue(self, state: GameState) -> Clue | ProviderFailure:
        """Return a validated clue for `state.current_team`, or a failure."""

    async def request_guess(self, state: GameState) -> GuessProposal | ProviderFailure:
        """Return one guesser response for the open turn, or a failure."""


class TeamAdapter:
    """Routes each request to the adapter configured for the team on turn."""

    def __init__(self, adapters: Mapping[Team, ProviderAdapter]):
        missing = [team.value for team in Team if team not in adapters]
        if missing:
            raise ValueError(f"Missing adapters for teams: {missing}")
        self.adapters = dict(adapters)

    async def request_clue(self, state: GameState) -> Clue | ProviderFailure:
        return await self.adapters[state.current_team].request_clue(state)

    async def request_guess(self, state: GameState) -> GuessProposal | ProviderFailure:
        return await self.adapters[state.current_team].request_guess(state)


class ModelProviderAdapter:
    """LLM-backed adapter that validates strict JSON output per role.

    Each attempt is one `client.complete` call. Transport errors and schema
    violations are retried alike under `retry_policy`; once attempts run out a
    `ProviderFailure` is returned rather than raised.
    """

    def __init__(
        self,
        client: LLMClient,
        *,
        retry_policy: RetryPolicy | None = None,
        on_event: Callable[[ProviderCallEvent], None] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        name: str | None = None,
    ):
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()
        self.on_event = on_event
        self.name = name or type(client).__name__
        self._sleep = sleep
        self._last_debug_context: dict[str, Any] | None = None

    def debug_context(self) -> dict[str, Any] | None:
        """Return prompts, raw responses and errors of the most recent request."""
        if self._last_debug_context is None:
            return None
        return dict(self._last_debug_context)

    async def request_clue(self, state: GameState) -> Clue | ProviderFailure:
        view = clue_giver_view(state)

        def parse(payload: dict[str, Any], raw: str) -> Clue:
            try:
                response = ClueResponse.model_validate(payload)
            except ValidationError as exc:
                raise ProviderSchemaViolation(f"Clue failed validation: {exc}", raw_response=raw) from exc
            self._check_clue_word(response.word, view, raw)
            return response.to_clue(view.team)

        return await self._request(Role.CLUE_GIVER, build_clue_prompt(view), parse)

    async def request_guess(self, state: GameState) -> GuessProposal | ProviderFailure:
        view = guesser_view(state)

        def parse(payload: dict[str, Any], raw: str) -> GuessProposal:
            try:
                return GuessResponse.model_validate(payload).to_proposal()
            except (ValidationError, ValueError) as exc:
                raise ProviderSchemaViolation(f"Guess failed validation: {exc}", raw_response=raw) from exc

        return await self._request(Role.GUESSER, build_guess_prompt(view), parse)

    async def _request(
        self,
        role: Role,
        prompt: str,
        parse: Callable[[dict[str, Any], str], Any],
    ) -> Any:
        policy = self.retry_policy
        system_prompt = system_prompt_for(role)
        context: dict[str, Any] = {
            "adapter": self.name,
            "role": role.value,
            "system_prompt": system_prompt,
            "initial_prompt": prompt,
            "repair_prompts": [],
            "raw_responses": [],
            "errors": [],
        }
        self._last_debug_context = context
        current_prompt = prompt
        attempt = 0

        while True:
            attempt += 1
            self._emit(ProviderCallEvent.create(role.value, ProviderCallStatus.ATTEMPTED, attempt, policy.max_attempts))
            start = perf_counter()
            raw: str | None = None
            try:
                raw = await asyncio.to_thread(self._complete, current_prompt, system_prompt)
                context["raw_responses"].append(raw)
                result = parse(self._extract_json_object(raw), raw)
            except ProviderError as exc:
                duration_ms = (perf_counter() - start) * 1000.0
                context["errors"].append({"attempt": attempt, "error": exc.to_dict()})
                self._emit(
                    ProviderCallEvent.create(
                        role.value,
                        ProviderCallStatus.FAILED,
                        attempt,
                        policy.max_attempts,
                        duration_ms=duration_ms,
                        error=exc.to_dict(),
                    )
                )
                logger.warning(
                    "%s %s attempt %d/%d failed: %s",
                    self.name,
                    role.value,
                    attempt,
                    policy.max_attempts,
                    exc,
                )
                if isinstance(exc, ProviderSchemaViolation):
                    repair = build_repair_prompt(raw_response=raw, error=str(exc), role=role)
                    context["repair_prompts"].append(repair)
                    current_prompt = f"{prompt}\n{repair}"
                if not policy.should_retry(attempt):
                    logger.error("%s %s gave up after %d attempt(s): %s", self.name, role.value, attempt, exc)
                    return ProviderFailure(role=role, attempts=attempt, cause=exc)
                await self._sleep(policy.backoff(attempt))
                continue

            self._emit(
                ProviderCallEvent.create(
                    role.value,
                    ProviderCallStatus.SUCCEEDED,
                    attempt,
                    policy.max_attempts,
                    duration_ms=(perf_counter() - start) * 1000.0,
                )
            )
            context["selected"] = result
            return result

    def _complete(self, prompt: str, system_prompt: str) -> str:
        try:
            raw = self.client.complete(prompt, system_prompt=system_prompt)
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderTransportFailure(f"LLM request failed: {exc}") from exc
        if not isinstance(raw, str):
            raise ProviderSchemaViolation(f"LLM returned {type(raw).__name__}, expected text.")
        return raw

    def _emit(self, event: ProviderCallEvent) -> None:
        if self.on_event is None:
            return
        try:
            self.on_event(event)
        except Exception:
            logger.exception("Provider event callback failed; continuing")

    def _check_clue_word(self, word: str, view: ClueGiverView, raw: str) -> None:
        clue = word.lower()
        for board_word in view.board_words:
            candidate = board_word.lower()
            if clue == candidate or candidate in clue:
                raise ProviderSchemaViolation(
                    f"Clue {word!r} uses the board word {board_word!r}.",
                    raw_response=raw,
                )

    def _extract_json_object(self, raw: str) -> dict[str, Any]:
        text = _FENCE_RE.sub("", raw.strip()).strip()
        if not text:
            raise ProviderSchemaViolation("LLM returned an empty response.", raw_response=raw)
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None

        if isinstance(parsed, dict):
            return parsed

        match = re.search(r"\{[\s\S]*\}", text)
        if not match:
            raise ProviderSchemaViolation("No JSON object found in LLM output.", raw_response=raw)
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise ProviderSchemaViolation(f"Malformed JSON in LLM output: {exc}", raw_response=raw) from exc
        if not isinstance(parsed, dict):
            raise ProviderSchemaViolation("LLM output JSON must be an object.", raw_response=raw)
        return parsed
