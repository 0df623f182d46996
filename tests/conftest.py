"""Shared fixtures: a scripted provider that replays canned token fragments."""

import pytest

from config.settings import Settings
from manager.registry import ProviderRegistry
from providers.base import BaseProvider


class ScriptedProvider(BaseProvider):
    """Replays one script per open_token_stream call, in call order.

    A script is a list of fragments; an Exception instance in the list is
    raised at that point of the stream.
    """

    type = "scripted"

    def __init__(self, name="P1", scripts=None, models=("m1",)):
        super().__init__(name=name, models=list(models))
        self.scripts = list(scripts or [])
        self.calls = []
        self.consumed = 0
        self.closed = 0

    def open_token_stream(self, model_name, messages, system_prompt):
        self.calls.append({"model": model_name, "messages": messages, "system": system_prompt})
        script = self.scripts[len(self.calls) - 1]
        return self._replay(script)

    def _replay(self, script):
        try:
            for item in script:
                if isinstance(item, Exception):
                    raise item
                self.consumed += 1
                yield item
        finally:
            self.closed += 1


def fenced(tag, code):
    return f"Here you go:\n```{tag}\n{code}```\nEnjoy!"


@pytest.fixture
def scripted_provider():
    """Factory: scripted_provider(name, scripts) -> ScriptedProvider."""
    def _make(name="P1", scripts=None, models=("m1",)):
        return ScriptedProvider(name=name, scripts=scripts, models=models)
    return _make


@pytest.fixture
def make_settings():
    """Factory: make_settings(*providers, **overrides) -> Settings."""
    def _make(*providers, **kwargs):
        return Settings(registry=ProviderRegistry(list(providers)), **kwargs)
    return _make


@pytest.fixture
def red_button_scripts():
    """Three stage replies for "make a red button", split at awkward places."""
    return [
        ["<thi", "nk>plan the markup</th", "ink>```ht", "ml\n<button id=\"go\">Go</but", "ton>\n``", "`"],
        [fenced("css", "#go { color: red; }\n")],
        ["```js\ndocument.getElementById('go')", ".onclick = () => alert('hi');\n```"],
    ]
