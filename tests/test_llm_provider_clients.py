"""Tests for provider HTTP clients, env loading and the provider factory."""

from __future__ import annotations

import io
import os
from urllib.error import HTTPError, URLError

import pytest

from engine.errors import ProviderTransportFailure
from engine.providers import env_utils, http_utils
from engine.providers.adapter import ModelProviderAdapter, TeamAdapter
from engine.providers.provider_clients import (
    DEFAULT_ANTHROPIC_MODEL,
    AnthropicMessagesClient,
    LocalOpenAICompatClient,
    OllamaClient,
    OpenAIChatClient,
    is_reasoning_model,
)
from engine.providers.random_adapter import RandomAdapter
from server.provider_factory import create_adapter, create_game_adapter, normalize_provider_config, retry_policy_for


def test_load_dotenv_sets_missing_vars(tmp_path, monkeypatch) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "OPENAI_API_KEY=test-key\n# comment\nexport CODENAMES_MODEL='gpt-4o'\nCODENAMES_PROVIDER=keep\n",
        encoding="utf-8",
    )
    # setenv first so the values loaded from the file are undone afterwards.
    for name in ("OPENAI_API_KEY", "CODENAMES_MODEL", "CODENAMES_RECORD_DIR"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("CODENAMES_PROVIDER", "random")
    env_utils.load_dotenv(dotenv, force=True)

    assert os.getenv("OPENAI_API_KEY") == "test-key"
    assert os.getenv("CODENAMES_MODEL") == "gpt-4o"
    assert os.getenv("CODENAMES_PROVIDER") == "random"

    settings = env_utils.GameSettings.from_env()
    assert settings.provider == "random"
    assert settings.model == "gpt-4o"


def test_require_env_any_names_every_candidate(monkeypatch) -> None:
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", True)
    monkeypatch.delenv("NOPE_ONE", raising=False)
    monkeypatch.delenv("NOPE_TWO", raising=False)
    with pytest.raises(ValueError, match="NOPE_ONE, NOPE_TWO"):
        env_utils.require_env_any("NOPE_ONE", "NOPE_TWO")


def test_openai_client_extracts_content(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "x")
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        captured["url"] = url
        captured["payload"] = payload
        captured["headers"] = headers
        return {"choices": [{"message": {"content": '{"word":"Sea","number":1}'}}]}

    monkeypatch.setattr("engine.providers.provider_clients.post_json", fake_post_json)
    client = OpenAIChatClient(model="gpt-4o")
    assert client.complete("hello", system_prompt="sys") == '{"word":"Sea","number":1}'
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["headers"] == {"Authorization": "Bearer x"}
    payload = captured["payload"]
    assert isinstance(payload, dict)
    assert payload["messages"][0] == {"role": "system", "content": "sys"}
    assert payload["temperature"] == 0.7


def test_openai_reasoning_models_inline_the_system_prompt(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "x")
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        captured["payload"] = payload
        return {"choices": [{"message": {"content": "{}"}}]}

    monkeypatch.setattr("engine.providers.provider_clients.post_json", fake_post_json)
    OpenAIChatClient(model="o1-preview", max_tokens=500).complete("prompt", system_prompt="sys")

    payload = captured["payload"]
    assert isinstance(payload, dict)
    assert payload["messages"] == [{"role": "user", "content": "sys\n\nprompt"}]
    assert "temperature" not in payload
    assert payload["max_completion_tokens"] == 500
    assert is_reasoning_model("o1-mini")
    assert not is_reasoning_model("gpt-4o")


def test_openai_client_rejects_empty_choices(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "x")
    monkeypatch.setattr(
        "engine.providers.provider_clients.post_json",
        lambda url, payload, headers, timeout_sec=60.0: {"choices": []},
    )
    with pytest.raises(ProviderTransportFailure):
        OpenAIChatClient().complete("hello")


def test_anthropic_client_extracts_text_blocks(monkeypatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "x")
    monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        captured["url"] = url
        captured["payload"] = payload
        return {"content": [{"type": "text", "text": '{"words":"WAVE"}'}]}

    monkeypatch.setattr("engine.providers.provider_clients.post_json", fake_post_json)
    client = AnthropicMessagesClient(model="claude")
    assert client.complete("hello", system_prompt="sys") == '{"words":"WAVE"}'
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    payload = captured["payload"]
    assert isinstance(payload, dict)
    assert payload["system"] == "sys"


def test_anthropic_client_falls_back_when_model_missing(monkeypatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "x")
    calls: list[dict[str, object]] = []

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        calls.append({"url": url, "payload": dict(payload)})
        if len(calls) == 1:
            raise ProviderTransportFailure(
                "HTTP 404 from https://api.anthropic.com/v1/messages: "
                '{"type":"error","error":{"type":"not_found_error","message":"model: missing-model"}}'
            )
        return {"content": [{"type": "text", "text": "{}"}]}

    monkeypatch.setattr("engine.providers.provider_clients.post_json", fake_post_json)
    assert AnthropicMessagesClient(model="missing-model").complete("hello") == "{}"
    assert len(calls) == 2
    assert calls[0]["payload"]["model"] == "missing-model"
    assert calls[1]["payload"]["model"] == DEFAULT_ANTHROPIC_MODEL


def test_local_clients_hit_their_endpoints(monkeypatch) -> None:
    urls: list[str] = []

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        urls.append(url)
        if url.endswith("/api/chat"):
            return {"message": {"content": '{"skip":true}'}}
        return {"choices": [{"message": {"content": [{"type": "text", "text": '{"skip":'}, {"text": "true}"}]}}]}

    monkeypatch.setattr("engine.providers.provider_clients.post_json", fake_post_json)
    assert OllamaClient(model="llama3.1").complete("hi") == '{"skip":true}'
    assert LocalOpenAICompatClient(model="m", base_url="http://127.0.0.1:9999/v1/").complete("hi") == '{"skip":true}'
    assert urls == ["http://127.0.0.1:11434/api/chat", "http://127.0.0.1:9999/v1/chat/completions"]


def test_post_json_wraps_transport_errors(monkeypatch) -> None:
    def raise_http(request, timeout):  # noqa: ANN001
        raise HTTPError(request.full_url, 500, "boom", {}, io.BytesIO(b"server exploded"))

    monkeypatch.setattr(http_utils, "urlopen", raise_http)
    with pytest.raises(ProviderTransportFailure, match="HTTP 500"):
        http_utils.post_json("http://example.invalid/x", {}, {})

    def raise_url(request, timeout):  # noqa: ANN001
        raise URLError("no route")

    monkeypatch.setattr(http_utils, "urlopen", raise_url)
    with pytest.raises(ProviderTransportFailure, match="no route"):
        http_utils.post_json("http://example.invalid/x", {}, {})


def test_factory_builds_adapters_from_configs(monkeypatch) -> None:
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", True)
    monkeypatch.setenv("CODENAMES_PROVIDER", "random")
    monkeypatch.delenv("CODENAMES_MODEL", raising=False)

    assert normalize_provider_config(None) == {"type": "random"}
    assert normalize_provider_config("OpenAI") == {"type": "openai"}
    assert isinstance(create_adapter(None), RandomAdapter)

    adapter = create_adapter({"type": "openai", "model": "gpt-4o", "max_retries": 1, "retry_delay_sec": 0.5})
    assert isinstance(adapter, ModelProviderAdapter)
    assert adapter.name == "openai:gpt-4o"
    assert adapter.retry_policy.max_attempts == 2
    assert adapter.retry_policy.backoff(2) == 0.5

    assert retry_policy_for({"backoff_multiplier": 2.0}).backoff(2) == 2.0

    per_team = create_game_adapter(None, {"red": "random", "blue": {"type": "anthropic"}})
    assert isinstance(per_team, TeamAdapter)
    with pytest.raises(ValueError):
        create_game_adapter(None, {"green": "random"})
    with pytest.raises(ValueError):
        create_adapter("perplexity")
