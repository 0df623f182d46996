"""Process-wide settings, built once at startup and passed by reference."""

import json
import logging
import os
from dataclasses import dataclass, field

from config.defaults import DEFAULTS
from core.errors import ConfigurationError
from core.state import STAGES
from manager.registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    registry: ProviderRegistry = field(default_factory=ProviderRegistry)
    prompts: dict = field(default_factory=lambda: dict(DEFAULTS["system_prompts"]))
    prompt_overrides: list = field(default_factory=list)
    sentinel: str = DEFAULTS["sentinel"]
    reasoning_open_tag: str = DEFAULTS["reasoning_open_tag"]
    reasoning_close_tag: str = DEFAULTS["reasoning_close_tag"]
    session_ttl: int = DEFAULTS["session_ttl"]
    max_sessions: int = DEFAULTS["max_sessions"]

    def system_prompt(self, stage, model_name):
        """Default system prompt for a stage, unless an override names this model."""
        prompt = self.prompts.get(stage, "")
        for override in self.prompt_overrides:
            if override.get("model") != model_name:
                continue
            custom = (override.get(stage) or {}).get("system")
            if custom:
                prompt = custom
            break
        return prompt


def _read_prompts(raw):
    prompts = dict(DEFAULTS["system_prompts"])
    for stage, entry in (raw or {}).items():
        if stage not in STAGES:
            raise ConfigurationError(f"Unknown stage in prompts: {stage!r}")
        if not isinstance(entry, dict) or "system" not in entry:
            raise ConfigurationError(f"Prompt for {stage!r} needs a \"system\" field")
        prompts[stage] = entry["system"]
    return prompts


def load_settings(path=None):
    """Load settings from a JSON config file.

    Lookup order: explicit path, MULTIFORGE_CONFIG, then config.json in the
    working directory. A missing file yields defaults with no providers.
    """
    path = path or os.environ.get("MULTIFORGE_CONFIG") or DEFAULTS["config_path"]
    if not os.path.exists(path):
        logger.warning("Config file %s not found, starting with no providers", path)
        return Settings()

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")

    max_tokens = data.get("maxTokens", DEFAULTS["max_tokens"])
    overrides = data.get("promptOverrides", [])
    if not isinstance(overrides, list):
        raise ConfigurationError("\"promptOverrides\" must be a list")

    settings = Settings(
        registry=ProviderRegistry.from_config(data.get("providers", []), max_tokens),
        prompts=_read_prompts(data.get("prompts")),
        prompt_overrides=overrides,
        sentinel=data.get("sentinel", DEFAULTS["sentinel"]),
        session_ttl=data.get("sessionTTL", DEFAULTS["session_ttl"]),
        max_sessions=data.get("maxSessions", DEFAULTS["max_sessions"]),
    )
    logger.info("Loaded %d provider(s) from %s", len(settings.registry.providers), path)
    return settings
