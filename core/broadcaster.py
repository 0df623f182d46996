"""Turns per-model running totals into minimal, wrapped wire deltas."""

import logging

from core.state import STAGE_TAGS, ModelDone, ModelError, StageProgress

logger = logging.getLogger(__name__)

CLOSE_MARKER = "\n```\n"


def open_marker(stage):
    return f"```{STAGE_TAGS[stage]}\n"


class DeltaBroadcaster:
    """Multiplexes pipeline events from many models into wire payloads.

    Keeps, per model, the stage currently open on the wire and how much of
    its running total has already been sent. Every character of a stage's
    content is sent exactly once, wrapped in a ```<tag> ... ``` block so a
    client can concatenate everything it receives for a model.
    """

    def __init__(self):
        self._stage = {}        # model -> stage open on the wire, or None
        self._sent = {}         # model -> chars of that stage already sent
        self._pending = set()   # models without a terminal event yet

    def expect(self, models):
        self._pending.update(models)

    @property
    def finished(self):
        return not self._pending

    def publish(self, event):
        """Return the wire payloads (dicts) for one pipeline event."""
        if isinstance(event, StageProgress):
            return self._progress(event)
        if isinstance(event, ModelDone):
            out = self._close(event.model)
            out.append({"type": "modelDone", "model": event.model, "done": True})
            self._finish(event.model)
            return out
        if isinstance(event, ModelError):
            out = self._close(event.model)
            out.append({"type": "modelError", "model": event.model, "error": event.message})
            self._finish(event.model)
            return out
        raise TypeError(f"Unsupported event: {event!r}")

    def _progress(self, event):
        model = event.model
        out = []
        prefix = ""
        if self._stage.get(model) != event.stage:
            out.extend(self._close(model))
            self._stage[model] = event.stage
            self._sent[model] = 0
            prefix = open_marker(event.stage)
            logger.debug("%s: opening %s block", model, event.stage)

        sent = self._sent[model]
        if len(event.content) < sent:
            raise ValueError(
                f"{model}: running total for {event.stage} shrank ({len(event.content)} < {sent})"
            )
        delta = event.content[sent:]
        self._sent[model] = len(event.content)

        if prefix or delta:
            out.append(self._payload(model, event.stage, prefix + delta))
        return out

    def _close(self, model):
        stage = self._stage.get(model)
        if stage is None:
            return []
        self._stage[model] = None
        self._sent[model] = 0
        return [self._payload(model, stage, CLOSE_MARKER)]

    def _finish(self, model):
        self._pending.discard(model)
        self._stage.pop(model, None)
        self._sent.pop(model, None)

    @staticmethod
    def _payload(model, stage, content):
        return {"type": "stageProgress", "model": model, "stage": stage, "content": content}
