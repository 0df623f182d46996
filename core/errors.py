"""MultiForge exception hierarchy.

Everything raised on purpose by the pipeline derives from MultiForgeError so
the worker boundary can turn it into a model-scoped error event:

    try:
        ...
    except ProviderError as e:
        print(f"provider failed: {e.message}")
    except MultiForgeError as e:
        print(f"pipeline error: {e}")
"""


class MultiForgeError(Exception):
    """Base exception for all MultiForge errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(MultiForgeError):
    """Config file is unreadable or has invalid provider entries."""


# Provider errors


class ProviderError(MultiForgeError):
    """Base class for failures raised while talking to a model provider."""


class ProviderTransportError(ProviderError):
    """Network or authentication failure opening or reading a token stream."""


class ProviderProtocolError(ProviderError):
    """Provider produced a fragment of an unexpected shape."""


# Orchestration errors


class OrchestrationInputError(MultiForgeError):
    """Malformed model identifier or unknown provider name.

    Raised before any provider stream is opened.
    """


class StageDependencyFailure(MultiForgeError):
    """A stage failed, so the stages that depend on it never ran."""

    def __init__(self, failed_stage: str, skipped: list[str], cause: Exception) -> None:
        self.failed_stage = failed_stage
        self.skipped = list(skipped)
        self.cause = cause
        message = f"{failed_stage} stage failed: {cause}"
        if self.skipped:
            message += f" (skipped: {', '.join(self.skipped)})"
        super().__init__(message)
