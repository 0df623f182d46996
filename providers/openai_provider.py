"""Token streams from OpenAI and OpenAI-compatible endpoints.

Covers OpenAI itself, local servers such as Ollama, gateways such as
OpenRouter, and Gemini through Google's OpenAI-compatible endpoint.
"""

import logging

import openai

from core.errors import ProviderProtocolError, ProviderTransportError
from providers.base import BaseProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseProvider):
    type = "openai"
    default_key_env = "OPENAI_API_KEY"
    default_base_url = ""

    def get_client(self):
        base_url = self.base_url or self.default_base_url or None
        # Self-hosted endpoints usually accept any key
        api_key = self.resolve_api_key(required=not self.base_url)
        return openai.OpenAI(
            api_key=api_key or "not-needed",
            base_url=base_url,
            default_headers={"X-Title": "MultiForge"},
        )

    def open_token_stream(self, model_name, messages, system_prompt):
        client = self.get_client()
        history = [m for m in messages if m["role"] != "system"]
        if system_prompt:
            history.insert(0, {"role": "system", "content": system_prompt})

        try:
            stream = client.chat.completions.create(
                model=model_name,
                messages=history,
                max_tokens=self.max_tokens,
                stream=True,
            )
            try:
                for chunk in stream:
                    text = self._chunk_text(chunk, model_name)
                    if text:
                        yield text
            finally:
                stream.close()
        except openai.APIResponseValidationError as e:
            raise ProviderProtocolError(f"{self.name}/{model_name}: unexpected response: {e}") from e
        except openai.APIError as e:
            logger.debug("OpenAI stream failed for %s/%s", self.name, model_name, exc_info=True)
            raise ProviderTransportError(f"{self.name}/{model_name}: {e}") from e

    def _chunk_text(self, chunk, model_name):
        choices = getattr(chunk, "choices", None)
        if choices is None:
            raise ProviderProtocolError(f"{self.name}/{model_name}: stream chunk without choices")
        if not choices:
            return ""
        delta = getattr(choices[0], "delta", None)
        return getattr(delta, "content", None) or ""


class GoogleProvider(OpenAIProvider):
    """Gemini models through Google's OpenAI-compatible endpoint."""

    type = "google"
    default_key_env = "GEMINI_API_KEY"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta/openai/"

    def get_client(self):
        return openai.OpenAI(
            api_key=self.resolve_api_key(),
            base_url=self.base_url or self.default_base_url,
        )
