"""Factory for building provider adapters from request or CLI configuration."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from codenames.codenames_state import Team
from engine.events import ProviderCallEvent
from engine.providers.adapter import LLMClient, ModelProviderAdapter, ProviderAdapter, TeamAdapter
from engine.providers.env_utils import GameSettings, getenv_any
from engine.providers.provider_clients import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_OPENAI_MODEL,
    AnthropicMessagesClient,
    LocalOpenAICompatClient,
    OllamaClient,
    OpenAIChatClient,
)
from engine.providers.random_adapter import RandomAdapter
from engine.retry import RetryPolicy

SUPPORTED_PROVIDERS = ("random", "openai", "anthropic", "ollama", "local")

# Two retries one second apart.
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY_SEC = 1.0


def normalize_provider_config(raw: Any, *, settings: GameSettings | None = None) -> dict[str, Any]:
    """Normalize `"openai"`, `{"type": "openai", ...}` or None into a dict."""
    settings = settings or GameSettings.from_env()
    if raw is None:
        data: dict[str, Any] = {"type": settings.provider}
        if settings.model:
            data["model"] = settings.model
        return data
    if isinstance(raw, str):
        return {"type": raw.strip().lower() or settings.provider}
    if isinstance(raw, Mapping):
        data = dict(raw)
        data["type"] = str(data.get("type", settings.provider)).strip().lower()
        return data
    raise ValueError(f"Unsupported provider configuration: {raw!r}")


def provider_label(config: Mapping[str, Any]) -> str:
    """Return a short label like `openai:gpt-4o`."""
    provider_type = str(config.get("type", "random")).lower()
    model = config.get("model")
    if model:
        return f"{provider_type}:{model}"
    return provider_type


def retry_policy_for(config: Mapping[str, Any]) -> RetryPolicy:
    max_retries = int(config.get("max_retries", DEFAULT_MAX_RETRIES))
    delay = float(config.get("retry_delay_sec", DEFAULT_RETRY_DELAY_SEC))
    if "backoff_multiplier" in config:
        return RetryPolicy(
            max_attempts=max_retries + 1,
            base_delay_sec=delay,
            multiplier=float(config["backoff_multiplier"]),
            max_delay_sec=float(config.get("max_delay_sec", max(delay, 8.0))),
        )
    return RetryPolicy.fixed(delay, max_attempts=max_retries + 1)


def create_client(config: Mapping[str, Any]) -> LLMClient:
    """Instantiate the HTTP client for a model-backed provider config."""
    provider_type = str(config.get("type", "")).lower()
    temperature = float(config.get("temperature", 0.7))
    max_tokens = int(config["max_tokens"]) if "max_tokens" in config else None

    if provider_type == "openai":
        return OpenAIChatClient(
            model=str(config.get("model") or DEFAULT_OPENAI_MODEL),
            base_url=str(config.get("base_url") or getenv_any("OPENAI_BASE_URL", default="https://api.openai.com/v1")),
            temperature=temperature,
            max_tokens=max_tokens,
        )

    if provider_type == "anthropic":
        return AnthropicMessagesClient(
            model=str(config.get("model") or DEFAULT_ANTHROPIC_MODEL),
            temperature=temperature,
            max_tokens=max_tokens or 1024,
        )

    if provider_type == "ollama":
        return OllamaClient(
            model=str(config.get("model") or "llama3.1"),
            base_url=str(config.get("base_url") or getenv_any("OLLAMA_BASE_URL", default="http://127.0.0.1:11434")),
            temperature=temperature,
        )

    if provider_type == "local":
        return LocalOpenAICompatClient(
            model=str(config.get("model") or "local-model"),
            base_url=str(config.get("base_url") or getenv_any("LOCAL_LLM_BASE_URL", default="http://127.0.0.1:8000/v1")),
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=config.get("api_key") or getenv_any("LOCAL_LLM_API_KEY"),
        )

    raise ValueError(
        f"Unsupported provider type '{provider_type}'. Supported types: {', '.join(SUPPORTED_PROVIDERS)}."
    )


def create_adapter(
    raw: Any = None,
    *,
    settings: GameSettings | None = None,
    on_event: Callable[[ProviderCallEvent], None] | None = None,
) -> ProviderAdapter:
    """Instantiate the adapter for one provider config."""
    config = normalize_provider_config(raw, settings=settings)
    if config["type"] == "random":
        return RandomAdapter(seed=config.get("seed"), clue_number=int(config.get("clue_number", 1)))
    return ModelProviderAdapter(
        create_client(config),
        retry_policy=retry_policy_for(config),
        on_event=on_event,
        name=provider_label(config),
    )


def create_game_adapter(
    provider: Any = None,
    providers: Mapping[str, Any] | None = None,
    *,
    settings: GameSettings | None = None,
    on_event: Callable[[ProviderCallEvent], None] | None = None,
) -> ProviderAdapter:
    """One adapter for the whole game, or one per team when `providers` is given."""
    if not providers:
        return create_adapter(provider, settings=settings, on_event=on_event)
    unknown = sorted(set(providers) - {team.value for team in Team})
    if unknown:
        raise ValueError(f"Unknown teams in providers: {unknown}")
    return TeamAdapter(
        {
            team: create_adapter(providers.get(team.value, provider), settings=settings, on_event=on_event)
            for team in Team
        }
    )
