"""Provider-specific LLM clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..errors import ProviderTransportFailure
from .env_utils import getenv_any, require_env_any
from .http_utils import post_json

DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"

# OpenAI reasoning models reject system messages and temperature.
_OPENAI_REASONING_PREFIXES = ("o1", "o3", "o4")


def is_reasoning_model(model: str) -> bool:
    return model.strip().lower().startswith(_OPENAI_REASONING_PREFIXES)


def _anthropic_messages_url(base_url: str) -> str:
    normalized = (base_url or "https://api.anthropic.com").rstrip("/")
    if normalized.endswith("/v1/messages"):
        return normalized
    if normalized.endswith("/v1"):
        return f"{normalized}/messages"
    return f"{normalized}/v1/messages"


def _is_model_not_found_error(exc: Exception) -> bool:
    text = str(exc).lower()
    return "not_found_error" in text and "model" in text


def _chat_messages(prompt: str, system_prompt: str | None, *, inline_system: bool = False) -> list[dict[str, str]]:
    if system_prompt and inline_system:
        return [{"role": "user", "content": f"{system_prompt}\n\n{prompt}"}]
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def _extract_openai_content(response: dict[str, Any]) -> str:
    choices = response.get("choices", [])
    if not choices:
        raise ProviderTransportFailure("Provider response did not include choices.")
    message = choices[0].get("message", {})
    content = message.get("content")
    if isinstance(content, list):
        # Some providers return structured content blocks.
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    if not isinstance(content, str):
        raise ProviderTransportFailure("Provider response message content was not a string.")
    return content


@dataclass(frozen=True)
class OpenAIChatClient:
    """OpenAI Chat Completions API client.

    Reasoning models (o1 family) get the system prompt folded into the user
    message and no temperature.
    """

    model: str = DEFAULT_OPENAI_MODEL
    base_url: str = "https://api.openai.com/v1"
    timeout_sec: float = 120.0
    temperature: float = 0.7
    max_tokens: int | None = None
    api_key_env: tuple[str, ...] = ("OPENAI_API_KEY",)

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        api_key = require_env_any(*self.api_key_env)
        reasoning = is_reasoning_model(self.model)
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_prompt, inline_system=reasoning),
        }
        if not reasoning:
            payload["temperature"] = self.temperature
        if self.max_tokens is not None:
            payload["max_completion_tokens" if reasoning else "max_tokens"] = self.max_tokens
        response = post_json(
            url=f"{self.base_url.rstrip('/')}/chat/completions",
            payload=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout_sec=self.timeout_sec,
        )
        return _extract_openai_content(response)


@dataclass(frozen=True)
class AnthropicMessagesClient:
    """Anthropic Messages API client."""

    model: str = DEFAULT_ANTHROPIC_MODEL
    base_url: str = "https://api.anthropic.com"
    timeout_sec: float = 120.0
    temperature: float = 0.7
    max_tokens: int = 1024
    anthropic_version: str = "2023-06-01"
    api_key_env: tuple[str, ...] = ("ANTHROPIC_API_KEY",)

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        api_key = require_env_any(*self.api_key_env)
        model = self.model.strip() or DEFAULT_ANTHROPIC_MODEL
        base_url = getenv_any("ANTHROPIC_BASE_URL", default=self.base_url) or self.base_url
        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt
        url = _anthropic_messages_url(base_url)
        headers = {
            "x-api-key": api_key,
            "anthropic-version": self.anthropic_version,
        }
        try:
            response = post_json(url=url, payload=payload, headers=headers, timeout_sec=self.timeout_sec)
        except ProviderTransportFailure as exc:
            if not _is_model_not_found_error(exc) or model == DEFAULT_ANTHROPIC_MODEL:
                raise
            # A stale custom model name falls back to the supported default.
            payload["model"] = DEFAULT_ANTHROPIC_MODEL
            response = post_json(url=url, payload=payload, headers=headers, timeout_sec=self.timeout_sec)
        content = response.get("content", [])
        if not content:
            raise ProviderTransportFailure("Anthropic response did not include content blocks.")
        joined = "".join(
            block.get("text", "")
            for block in content
            if isinstance(block, dict) and block.get("type") == "text"
        ).strip()
        if not joined:
            raise ProviderTransportFailure("Anthropic response contained no text content.")
        return joined


@dataclass(frozen=True)
class OllamaClient:
    """Local Ollama chat client."""

    model: str
    base_url: str = "http://127.0.0.1:11434"
    timeout_sec: float = 180.0
    temperature: float = 0.7

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        payload = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_prompt),
            "stream": False,
            "format": "json",
            "options": {"temperature": self.temperature},
        }
        response = post_json(
            url=f"{self.base_url.rstrip('/')}/api/chat",
            payload=payload,
            headers={},
            timeout_sec=self.timeout_sec,
        )
        content = response.get("message", {}).get("content")
        if not isinstance(content, str):
            raise ProviderTransportFailure("Ollama response did not include message.content.")
        return content


@dataclass(frozen=True)
class LocalOpenAICompatClient:
    """Client for local OpenAI-compatible servers (vLLM, TGI gateway, NIM)."""

    model: str
    base_url: str = "http://127.0.0.1:8000/v1"
    timeout_sec: float = 180.0
    temperature: float = 0.7
    max_tokens: int | None = None
    api_key: str | None = None

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_prompt),
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        headers: dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        response = post_json(
            url=f"{self.base_url.rstrip('/')}/chat/completions",
            payload=payload,
            headers=headers,
            timeout_sec=self.timeout_sec,
        )
        return _extract_openai_content(response)
