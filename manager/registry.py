"""Provider registry - resolves "provider/model" identifiers to provider bindings."""

from core.errors import ConfigurationError, OrchestrationInputError
from providers.anthropic_provider import AnthropicProvider
from providers.openai_provider import GoogleProvider, OpenAIProvider

PROVIDER_TYPES = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
    "google": GoogleProvider,
}


def parse_model_identifier(identifier):
    """Split "Provider/model" on the first separator.

    The model part may itself contain slashes (OpenRouter style ids such as
    "OpenRouter/meta-llama/llama-3-70b").
    """
    if not isinstance(identifier, str) or "/" not in identifier:
        raise OrchestrationInputError(
            f"Invalid model identifier {identifier!r}. Expected 'Provider/Model'"
        )
    provider_name, _, model_name = identifier.partition("/")
    provider_name = provider_name.strip()
    model_name = model_name.strip()
    if not provider_name or not model_name:
        raise OrchestrationInputError(
            f"Invalid model identifier {identifier!r}. Expected 'Provider/Model'"
        )
    return provider_name, model_name


def build_provider(entry, max_tokens=None):
    """Create a provider from one config entry (the "providers" list of config.json)."""
    if not isinstance(entry, dict) or not entry.get("name"):
        raise ConfigurationError(f"Provider entry needs a name: {entry!r}")
    kind = entry.get("type", "openai")
    cls = PROVIDER_TYPES.get(kind)
    if cls is None:
        raise ConfigurationError(
            f"Unknown provider type {kind!r} for '{entry['name']}'. "
            f"Expected one of: {', '.join(sorted(PROVIDER_TYPES))}"
        )
    return cls(
        name=entry["name"],
        api_key=entry.get("apiKey", ""),
        api_key_env=entry.get("apiKeyEnv", ""),
        base_url=entry.get("baseURL", ""),
        models=entry.get("availableModels", []),
        max_tokens=max_tokens,
    )


class ProviderRegistry:
    def __init__(self, providers=None):
        self.providers = {}
        for provider in providers or []:
            self.register(provider)

    @classmethod
    def from_config(cls, entries, max_tokens=None):
        return cls([build_provider(entry, max_tokens) for entry in entries or []])

    def register(self, provider):
        if provider.name in self.providers:
            raise ConfigurationError(f"Duplicate provider name: {provider.name}")
        self.providers[provider.name] = provider

    def get(self, name):
        return self.providers.get(name)

    def resolve(self, identifier):
        """Return (provider, model_name). Raises OrchestrationInputError."""
        provider_name, model_name = parse_model_identifier(identifier)
        provider = self.get(provider_name)
        if provider is None:
            raise OrchestrationInputError(f"Provider '{provider_name}' not found")
        return provider, model_name

    def list_providers(self):
        """Return a list of secret-free provider summaries."""
        return [p.describe() for p in self.providers.values()]
