"""Model provider adapters and HTTP clients."""

from .adapter import LLMClient, ModelProviderAdapter, ProviderAdapter, ProviderFailure, TeamAdapter
from .env_utils import GameSettings, getenv_any, load_dotenv, require_env_any
from .provider_clients import (
    AnthropicMessagesClient,
    LocalOpenAICompatClient,
    OllamaClient,
    OpenAIChatClient,
    is_reasoning_model,
)
from .random_adapter import RandomAdapter
from .scripted import ScriptedAdapter

__all__ = [
    "AnthropicMessagesClient",
    "GameSettings",
    "LLMClient",
    "LocalOpenAICompatClient",
    "ModelProviderAdapter",
    "OllamaClient",
    "OpenAIChatClient",
    "ProviderAdapter",
    "ProviderFailure",
    "RandomAdapter",
    "ScriptedAdapter",
    "TeamAdapter",
    "getenv_any",
    "is_reasoning_model",
    "load_dotenv",
    "require_env_any",
]
