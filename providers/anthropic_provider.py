"""Claude token streams via the Anthropic SDK."""

import logging

import anthropic

from core.errors import ProviderProtocolError, ProviderTransportError
from providers.base import BaseProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    type = "anthropic"
    default_key_env = "ANTHROPIC_API_KEY"

    def get_client(self):
        kwargs = {"api_key": self.resolve_api_key()}
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return anthropic.Anthropic(**kwargs)

    def open_token_stream(self, model_name, messages, system_prompt):
        client = self.get_client()
        # System instructions travel separately in the Messages API
        turns = [m for m in messages if m["role"] != "system"]
        kwargs = {
            "model": model_name,
            "max_tokens": self.max_tokens,
            "messages": turns,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            with client.messages.stream(**kwargs) as stream:
                for text in stream.text_stream:
                    yield text
        except anthropic.APIResponseValidationError as e:
            raise ProviderProtocolError(f"{self.name}/{model_name}: unexpected response: {e}") from e
        except anthropic.APIError as e:
            logger.debug("Anthropic stream failed for %s/%s", self.name, model_name, exc_info=True)
            raise ProviderTransportError(f"{self.name}/{model_name}: {e}") from e
