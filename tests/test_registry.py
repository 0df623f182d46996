"""Tests for manager.registry — model identifiers and provider construction."""

import pytest

from core.errors import ConfigurationError, OrchestrationInputError
from manager.registry import ProviderRegistry, build_provider, parse_model_identifier
from providers.anthropic_provider import AnthropicProvider
from providers.openai_provider import GoogleProvider, OpenAIProvider


# ---------------------------------------------------------------------------
# parse_model_identifier
# ---------------------------------------------------------------------------

def test_parse_simple_identifier():
    assert parse_model_identifier("OpenAI/gpt-4o") == ("OpenAI", "gpt-4o")


def test_parse_keeps_slashes_in_model_name():
    assert parse_model_identifier("OpenRouter/meta-llama/llama-3-70b") == (
        "OpenRouter", "meta-llama/llama-3-70b",
    )


def test_parse_keeps_colons():
    assert parse_model_identifier("Ollama/llama3.2:latest") == ("Ollama", "llama3.2:latest")


@pytest.mark.parametrize("bad", ["gpt-4o", "/gpt-4o", "OpenAI/", "", None])
def test_parse_rejects_malformed(bad):
    with pytest.raises(OrchestrationInputError):
        parse_model_identifier(bad)


# ---------------------------------------------------------------------------
# build_provider
# ---------------------------------------------------------------------------

def test_build_provider_types():
    assert isinstance(build_provider({"name": "A", "type": "anthropic"}), AnthropicProvider)
    assert isinstance(build_provider({"name": "G", "type": "google"}), GoogleProvider)
    assert type(build_provider({"name": "O"})) is OpenAIProvider


def test_build_provider_fields():
    p = build_provider({
        "name": "Ollama", "type": "openai", "baseURL": "http://localhost:11434/v1",
        "apiKey": "k", "availableModels": ["llama3.2"],
    }, max_tokens=1000)
    assert p.base_url == "http://localhost:11434/v1"
    assert p.api_key == "k"
    assert p.models == ["llama3.2"]
    assert p.max_tokens == 1000


def test_build_provider_unknown_type():
    with pytest.raises(ConfigurationError, match="Unknown provider type"):
        build_provider({"name": "X", "type": "carrier-pigeon"})


def test_build_provider_requires_name():
    with pytest.raises(ConfigurationError):
        build_provider({"type": "openai"})


# ---------------------------------------------------------------------------
# ProviderRegistry
# ---------------------------------------------------------------------------

def test_resolve_known_provider():
    registry = ProviderRegistry.from_config([{"name": "OpenAI", "type": "openai"}])
    provider, model = registry.resolve("OpenAI/gpt-4o")
    assert provider.name == "OpenAI"
    assert model == "gpt-4o"


def test_resolve_unknown_provider():
    registry = ProviderRegistry()
    with pytest.raises(OrchestrationInputError, match="Provider 'Nope' not found"):
        registry.resolve("Nope/model")


def test_duplicate_provider_names_rejected():
    with pytest.raises(ConfigurationError, match="Duplicate"):
        ProviderRegistry.from_config([{"name": "A"}, {"name": "A"}])


def test_list_providers_hides_secrets():
    registry = ProviderRegistry.from_config([
        {"name": "OpenAI", "type": "openai", "apiKey": "sk-secret", "availableModels": ["gpt-4o"]},
    ])
    listed = registry.list_providers()
    assert listed == [{"name": "OpenAI", "type": "openai", "models": ["gpt-4o"]}]
    assert "sk-secret" not in str(listed)
