"""Pipeline state models shared across all stages."""

from __future__ import annotations

from dataclasses import dataclass, field

STAGES = ("markup", "styling", "behavior")

# Stage -> fence language tag used in prompts and on the wire
STAGE_TAGS = {"markup": "html", "styling": "css", "behavior": "js"}

STATUSES = ("not_started", "streaming", "completed", "reverted", "failed")


@dataclass(frozen=True)
class ConversationTurn:
    role: str           # "user" | "assistant"
    content: str

    @classmethod
    def from_dict(cls, data):
        role = data.get("role")
        if role not in ("user", "assistant"):
            raise ValueError(f"Unsupported conversation role: {role!r}")
        return cls(role=role, content=str(data.get("content", "")))

    def to_message(self):
        return {"role": self.role, "content": self.content}


@dataclass
class CodeArtifact:
    markup: str = ""
    styling: str = ""
    behavior: str = ""

    @classmethod
    def from_dict(cls, data):
        """Build from either stage names or the client's html/css/js keys."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"code must be an object, got {type(data).__name__}")
        kwargs = {}
        for stage in STAGES:
            value = data.get(stage)
            if value is None:
                value = data.get(STAGE_TAGS[stage])
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{STAGE_TAGS[stage]} code must be a string")
            kwargs[stage] = value or ""
        return cls(**kwargs)

    def get(self, stage):
        return getattr(self, stage)

    def is_empty(self):
        return not (self.markup or self.styling or self.behavior)

    def to_dict(self):
        return {STAGE_TAGS[stage]: getattr(self, stage) for stage in STAGES}


@dataclass
class StageRun:
    stage: str                      # markup | styling | behavior
    status: str = "not_started"     # see STATUSES
    accumulated: str = ""
    prior_code: str = ""
    error: str = ""

    @property
    def finished(self):
        return self.status in ("completed", "reverted")


# Events emitted by a model pipeline


@dataclass
class StageProgress:
    model: str
    stage: str
    content: str        # running total, not a delta


@dataclass
class ModelError:
    model: str
    message: str


@dataclass
class ModelDone:
    model: str
    artifact: CodeArtifact = field(default_factory=CodeArtifact)
