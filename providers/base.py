"""Abstract base class for all model providers."""

import os
from abc import ABC, abstractmethod

from config.defaults import DEFAULTS
from core.errors import ProviderTransportError


class BaseProvider(ABC):
    """Base class that every provider binding must extend."""

    type = "base"
    default_key_env = ""    # env var consulted when the config carries no key

    def __init__(self, name, api_key="", api_key_env="", base_url="", models=None,
                 max_tokens=None):
        self.name = name
        self.api_key = api_key
        self.api_key_env = api_key_env
        self.base_url = base_url
        self.models = list(models or [])
        self.max_tokens = max_tokens or DEFAULTS["max_tokens"]

    @abstractmethod
    def open_token_stream(self, model_name, messages, system_prompt):
        """Yield raw text fragments for one completion.

        messages is the ordered list of {"role", "content"} dicts. The returned
        generator is lazy, finite and cannot be restarted; closing it must
        release the underlying connection. Failures surface as
        ProviderTransportError or ProviderProtocolError.
        """

    def resolve_api_key(self, required=True):
        """Return the API key from config or environment. Raises if required and unset."""
        if self.api_key:
            return self.api_key
        env_name = self.api_key_env or self.default_key_env
        key = os.environ.get(env_name, "") if env_name else ""
        if not key and required:
            raise ProviderTransportError(
                f"No API key for provider '{self.name}'. Set \"apiKey\" in the config "
                f"or export {env_name or 'an API key variable'}."
            )
        return key

    def describe(self):
        """Public, secret-free summary for the client."""
        return {"name": self.name, "type": self.type, "models": list(self.models)}
